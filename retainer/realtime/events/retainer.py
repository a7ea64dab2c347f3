from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from asgiref.sync import async_to_sync

from retainer.clients.api.serializers import RefillSerializer
from retainer.clients.api.serializers import WorkLogSerializer
from retainer.realtime.hub import HubUninitialized
from retainer.realtime.hub import get_hub
from retainer.realtime.updates import DetailsUpdated
from retainer.realtime.updates import LogAdded
from retainer.realtime.updates import LogDeleted
from retainer.realtime.updates import ProjectDeleted
from retainer.realtime.updates import Refilled
from retainer.realtime.updates import StatusUpdated

if TYPE_CHECKING:  # import for type checking only
    from retainer.clients.models import Client
    from retainer.clients.models import Refill
    from retainer.clients.models import WorkLog
    from retainer.realtime.updates import UpdateEvent

logger = logging.getLogger(__name__)


class BroadcastResult(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
    HUB_UNINITIALIZED = "hub_uninitialized"
    FAILED = "failed"


def publish(room_id: str | None, event: UpdateEvent) -> BroadcastResult:
    """Fan ``event`` out to ``room_id`` from sync Django code.

    Never raises: by the time this runs the mutation is committed, so a
    delivery problem is logged and reported through the result only.
    """

    if not room_id:
        return BroadcastResult.SKIPPED
    try:
        hub = get_hub()
    except HubUninitialized:
        logger.warning(
            "Realtime hub not initialized; %s for room %s was not delivered",
            event.type.value,
            room_id,
        )
        return BroadcastResult.HUB_UNINITIALIZED
    try:
        async_to_sync(hub.broadcast_event)(room_id, event)
    except Exception:
        logger.exception(
            "Broadcast of %s to room %s failed", event.type.value, room_id
        )
        return BroadcastResult.FAILED
    return BroadcastResult.OK


def publish_log_added(log: WorkLog, room_id: str) -> BroadcastResult:
    return publish(room_id, LogAdded(log=dict(WorkLogSerializer(log).data)))


def publish_log_deleted(log_id: str, room_id: str) -> BroadcastResult:
    return publish(room_id, LogDeleted(log_id=str(log_id)))


def publish_refill(refill: Refill, room_id: str) -> BroadcastResult:
    event = Refilled(
        total_hours=float(refill.client.total_hours),
        refill=dict(RefillSerializer(refill).data),
    )
    return publish(room_id, event)


def publish_details_updated(client: Client) -> BroadcastResult:
    event = DetailsUpdated(
        name=client.name,
        total_hours=float(client.total_hours),
        refill_link=client.refill_link or None,
    )
    return publish(client.slug, event)


def publish_status_updated(client: Client) -> BroadcastResult:
    return publish(client.slug, StatusUpdated(status=client.status))


def publish_client_deleted(room_id: str) -> BroadcastResult:
    return publish(room_id, ProjectDeleted())
