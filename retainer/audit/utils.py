from __future__ import annotations

from typing import TYPE_CHECKING

from .models import AuditLog

if TYPE_CHECKING:
    from uuid import UUID


def log_action(  # noqa: PLR0913
    action: str,
    *,
    client_id: UUID | str | None = None,
    message: str = "",
    model_name: str = "",
    record_id: UUID | str | None = None,
    before: dict | list | None = None,
    after: dict | list | None = None,
) -> AuditLog:
    return AuditLog.objects.create(
        action=action,
        client_id=client_id,
        message=message,
        model_name=model_name,
        record_id=str(record_id) if record_id is not None else "",
        before=before,
        after=after,
    )
