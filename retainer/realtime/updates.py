"""Live update events pushed to retainer dashboards.

Every event travels on the ``retainer-update`` Socket.IO event as
``{"type": <tag>, "data": <payload>}``. Each tag has exactly one payload shape,
so dashboards can switch on ``type`` without guessing.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from typing import Any
from typing import ClassVar

UPDATE_EVENT_NAME = "retainer-update"


class UpdateType(str, Enum):
    ADD_LOG = "ADD_LOG"
    DELETE_LOG = "DELETE_LOG"
    REFILL = "REFILL"
    DETAILS_UPDATE = "DETAILS_UPDATE"
    STATUS_UPDATE = "STATUS_UPDATE"
    PROJECT_DELETED = "PROJECT_DELETED"


@dataclass(frozen=True)
class LogAdded:
    type: ClassVar[UpdateType] = UpdateType.ADD_LOG
    log: dict[str, Any]

    @property
    def data(self) -> dict[str, Any]:
        return dict(self.log)


@dataclass(frozen=True)
class LogDeleted:
    type: ClassVar[UpdateType] = UpdateType.DELETE_LOG
    log_id: str

    @property
    def data(self) -> str:
        return str(self.log_id)


@dataclass(frozen=True)
class Refilled:
    type: ClassVar[UpdateType] = UpdateType.REFILL
    total_hours: float
    refill: dict[str, Any] = field(default_factory=dict)

    @property
    def data(self) -> dict[str, Any]:
        return {"totalHours": self.total_hours, "refill": dict(self.refill)}


@dataclass(frozen=True)
class DetailsUpdated:
    type: ClassVar[UpdateType] = UpdateType.DETAILS_UPDATE
    name: str
    total_hours: float
    refill_link: str | None = None

    @property
    def data(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "totalHours": self.total_hours,
            "refillLink": self.refill_link,
        }


@dataclass(frozen=True)
class StatusUpdated:
    type: ClassVar[UpdateType] = UpdateType.STATUS_UPDATE
    status: str

    @property
    def data(self) -> dict[str, Any]:
        return {"status": self.status}


@dataclass(frozen=True)
class ProjectDeleted:
    type: ClassVar[UpdateType] = UpdateType.PROJECT_DELETED

    @property
    def data(self) -> None:
        return None


UpdateEvent = (
    LogAdded | LogDeleted | Refilled | DetailsUpdated | StatusUpdated | ProjectDeleted
)


def build_message(event_type: UpdateType | str, payload: Any = None) -> dict[str, Any]:
    """Wire form of an update. Raises ``ValueError`` on an unknown tag."""

    return {"type": UpdateType(event_type).value, "data": payload}
