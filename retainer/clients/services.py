"""Retainer mutations.

Every mutation resolves the client from its admin token, applies the change in
one transaction, writes an audit row, and returns the entity together with the
room (client slug) that should hear about it. Publishing is left to the caller
so it can happen after the transaction commits.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime
from decimal import Decimal
from decimal import InvalidOperation
from typing import Any
from typing import NamedTuple

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from django.utils.text import slugify

from retainer.audit.models import AuditLog
from retainer.audit.utils import log_action
from retainer.clients.exceptions import InvalidState
from retainer.clients.exceptions import NotFound
from retainer.clients.exceptions import ValidationFailed
from retainer.clients.models import MIN_HOURS
from retainer.clients.models import Client
from retainer.clients.models import Refill
from retainer.clients.models import WorkLog

logger = logging.getLogger(__name__)

SLUG_BASE_MAX_LENGTH = 60
ADMIN_TOKEN_BYTES = 32
ACTIVITY_LIMIT_MAX = 50

_UNSET: Any = object()


class MutationResult(NamedTuple):
    entity: Any
    room: str


def _hours(value, field: str = "hours") -> Decimal:
    try:
        hours = Decimal(str(value)).quantize(Decimal("0.01"))
    except (InvalidOperation, TypeError, ValueError):
        msg = f"{field} must be a number"
        raise ValidationFailed(msg) from None
    if not hours.is_finite() or hours < MIN_HOURS:
        msg = f"{field} must be a positive number"
        raise ValidationFailed(msg)
    return hours


def _required_text(value, field: str) -> str:
    text = (value or "").strip() if isinstance(value, str) else ""
    if not text:
        msg = f"{field} is required"
        raise ValidationFailed(msg)
    return text


def _generate_slug(name: str) -> str:
    base = slugify(name)[:SLUG_BASE_MAX_LENGTH].strip("-") or "client"
    while True:
        candidate = f"{base}-{secrets.token_hex(3)}"
        if not Client.objects.filter(slug=candidate).exists():
            return candidate


def _client_for_token(token: str, *, for_update: bool = False) -> Client:
    if not token:
        msg = "Client not found"
        raise NotFound(msg)
    qs = Client.objects.select_for_update() if for_update else Client.objects
    try:
        return qs.get(admin_token=token)
    except Client.DoesNotExist:
        msg = "Client not found"
        raise NotFound(msg) from None


def _ensure_mutable(client: Client) -> None:
    if client.status == Client.Status.ARCHIVED:
        msg = "Client is archived; change its status before editing it"
        raise InvalidState(msg)


def _snapshot(client: Client) -> dict[str, Any]:
    return {
        "name": client.name,
        "totalHours": float(client.total_hours),
        "refillLink": client.refill_link,
        "status": client.status,
    }


@transaction.atomic
def create_client(name: str, total_hours, refill_link: str | None = "") -> Client:
    name = _required_text(name, "name")
    hours = _hours(total_hours, "totalHours")
    client = Client.objects.create(
        name=name,
        slug=_generate_slug(name),
        admin_token=secrets.token_urlsafe(ADMIN_TOKEN_BYTES),
        total_hours=hours,
        refill_link=refill_link or "",
    )
    log_action(
        "client_created",
        client_id=client.id,
        model_name="Client",
        record_id=client.id,
        after=_snapshot(client),
    )
    logger.info("Created retainer %s with %s hours", client.slug, hours)
    return client


def get_admin_view(token: str) -> Client:
    client = _client_for_token(token)
    return Client.objects.prefetch_related("logs", "refills").get(pk=client.pk)


def get_public_view(slug: str) -> Client:
    slug = (slug or "").strip()
    try:
        return Client.objects.prefetch_related("logs").get(slug=slug)
    except Client.DoesNotExist:
        msg = "Client not found"
        raise NotFound(msg) from None


@transaction.atomic
def add_work_log(
    token: str,
    description: str,
    hours,
    date: datetime | None = None,
) -> MutationResult:
    client = _client_for_token(token, for_update=True)
    _ensure_mutable(client)
    if client.status == Client.Status.PAUSED:
        msg = "Client is paused; resume it before logging work"
        raise InvalidState(msg)

    log = WorkLog.objects.create(
        client=client,
        description=_required_text(description, "description"),
        hours=_hours(hours),
        date=date or timezone.now(),
    )
    log_action(
        "log_added",
        client_id=client.id,
        message=log.description,
        model_name="WorkLog",
        record_id=log.id,
        after={"hours": float(log.hours), "date": log.date.isoformat()},
    )
    return MutationResult(log, client.slug)


@transaction.atomic
def delete_work_log(token: str, log_id) -> MutationResult:
    client = _client_for_token(token, for_update=True)
    _ensure_mutable(client)
    try:
        log = client.logs.get(pk=log_id)
    except (WorkLog.DoesNotExist, DjangoValidationError, ValueError):
        # Logs of other clients are reported as missing, never as forbidden.
        msg = "Log not found"
        raise NotFound(msg) from None

    deleted_id = str(log.id)
    before = {"hours": float(log.hours), "description": log.description}
    log.delete()
    log_action(
        "log_deleted",
        client_id=client.id,
        model_name="WorkLog",
        record_id=deleted_id,
        before=before,
    )
    return MutationResult(deleted_id, client.slug)


@transaction.atomic
def add_refill(token: str, hours, note: str = "") -> MutationResult:
    """Top up the prepaid pool. Returns the refill; the client is refreshed."""

    client = _client_for_token(token, for_update=True)
    _ensure_mutable(client)
    amount = _hours(hours)
    before = float(client.total_hours)

    Client.objects.filter(pk=client.pk).update(
        total_hours=F("total_hours") + amount, updated_at=timezone.now()
    )
    refill = Refill.objects.create(client=client, hours=amount, note=note or "")
    client.refresh_from_db(fields=["total_hours", "updated_at"])

    log_action(
        "refill_added",
        client_id=client.id,
        message=refill.note,
        model_name="Refill",
        record_id=refill.id,
        before={"totalHours": before},
        after={"totalHours": float(client.total_hours)},
    )
    return MutationResult(refill, client.slug)


@transaction.atomic
def update_details(
    token: str,
    *,
    name: str | None = None,
    refill_link: str | None = _UNSET,
    total_hours=None,
) -> MutationResult:
    """Edit name, refill link and/or the total hours.

    ``refill_link`` left unset keeps the current link; ``None`` or ``""``
    clears it.
    """

    client = _client_for_token(token, for_update=True)
    _ensure_mutable(client)
    before = _snapshot(client)

    update_fields = ["updated_at"]
    if name is not None:
        client.name = _required_text(name, "name")
        update_fields.append("name")
    if refill_link is not _UNSET:
        client.refill_link = refill_link or ""
        update_fields.append("refill_link")
    if total_hours is not None:
        client.total_hours = _hours(total_hours, "totalHours")
        update_fields.append("total_hours")
    client.save(update_fields=update_fields)

    log_action(
        "details_updated",
        client_id=client.id,
        model_name="Client",
        record_id=client.id,
        before=before,
        after=_snapshot(client),
    )
    return MutationResult(client, client.slug)


@transaction.atomic
def update_status(token: str, status: str) -> MutationResult:
    if status not in Client.Status.values:
        msg = f"Status must be one of: {', '.join(Client.Status.values)}"
        raise ValidationFailed(msg)
    client = _client_for_token(token, for_update=True)
    previous = client.status
    client.status = status
    client.save(update_fields=["status", "updated_at"])
    log_action(
        "status_updated",
        client_id=client.id,
        model_name="Client",
        record_id=client.id,
        before={"status": previous},
        after={"status": status},
    )
    return MutationResult(client, client.slug)


@transaction.atomic
def delete_client(token: str) -> MutationResult:
    client = _client_for_token(token, for_update=True)
    client_id, slug = client.id, client.slug
    before = _snapshot(client)
    client.delete()
    log_action(
        "client_deleted",
        client_id=client_id,
        model_name="Client",
        record_id=client_id,
        before=before,
    )
    logger.info("Deleted retainer %s", slug)
    return MutationResult(client, slug)


def recent_activity(token: str, limit: int = 20) -> list[AuditLog]:
    client = _client_for_token(token)
    limit = max(1, min(int(limit), ACTIVITY_LIMIT_MAX))
    return list(AuditLog.objects.filter(client_id=client.id)[:limit])
