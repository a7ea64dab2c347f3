"""Room-based fan-out of retainer updates.

The hub keeps its own registry of connected Socket.IO sessions and of the rooms
(client slugs) they joined, and delivers each broadcast with one emit per
member so a broken session cannot stop the rest of the room from updating.

One hub exists per process. ``initialize`` in :mod:`retainer.realtime.socketio`
creates it; everything else reaches it through :func:`get_hub`.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING
from typing import Any

from retainer.realtime.updates import UPDATE_EVENT_NAME
from retainer.realtime.updates import build_message

if TYPE_CHECKING:
    import socketio

    from retainer.realtime.updates import UpdateEvent
    from retainer.realtime.updates import UpdateType

logger = logging.getLogger(__name__)


class HubUninitialized(RuntimeError):
    """Raised when the hub is used before the socket server was set up."""


class HubAlreadyInitialized(RuntimeError):
    """Raised on a second attempt to set up the process-wide hub."""


class NotificationHub:
    def __init__(self, server: socketio.AsyncServer):
        self.server = server
        self.connections: set[str] = set()
        self.rooms: dict[str, set[str]] = {}
        self._memberships: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    # -- connection lifecycle -------------------------------------------------

    async def on_connect(self, sid: str, environ: dict[str, Any], auth: Any = None):
        with self._lock:
            self.connections.add(sid)
            self._memberships.setdefault(sid, set())
        logger.info("Realtime connection opened: %s", sid)

    async def on_join_room(self, sid: str, data: Any = None):
        logger.info("Realtime event received: [join-room] %s %r", sid, data)
        room_id = data.strip() if isinstance(data, str) else ""
        if not room_id:
            logger.warning("join-room from %s without a room id: %r", sid, data)
            return
        self.join(sid, room_id)
        logger.info("Connection %s joined room %s", sid, room_id)

    async def on_disconnect(self, sid: str, reason: Any = None):
        self.forget(sid)
        logger.info("Realtime connection closed: %s (%s)", sid, reason or "-")

    async def on_other_event(self, event: str, sid: str, *args: Any):
        # Accepted and traced only; no other inbound event drives the hub.
        logger.info("Realtime event received: [%s] %s %r", event, sid, args)

    # -- registry -------------------------------------------------------------

    def join(self, sid: str, room_id: str) -> None:
        with self._lock:
            self.connections.add(sid)
            self.rooms.setdefault(room_id, set()).add(sid)
            self._memberships.setdefault(sid, set()).add(room_id)

    def forget(self, sid: str) -> None:
        with self._lock:
            for room_id in self._memberships.pop(sid, set()):
                members = self.rooms.get(room_id)
                if members is None:
                    continue
                members.discard(sid)
                if not members:
                    del self.rooms[room_id]
            self.connections.discard(sid)

    def members(self, room_id: str) -> set[str]:
        with self._lock:
            return set(self.rooms.get(room_id, ()))

    def rooms_of(self, sid: str) -> set[str]:
        with self._lock:
            return set(self._memberships.get(sid, ()))

    # -- delivery -------------------------------------------------------------

    async def broadcast(
        self,
        room_id: str | None,
        event_type: UpdateType | str,
        payload: Any = None,
    ) -> int:
        """Send one update to every connection currently in ``room_id``.

        Returns the number of connections the update was handed to. A missing
        room id is a silent no-op, as is a room nobody joined.
        """

        if not room_id:
            return 0
        message = build_message(event_type, payload)
        delivered = 0
        for sid in self.members(room_id):
            try:
                await self.server.emit(UPDATE_EVENT_NAME, message, to=sid)
            except Exception:
                logger.warning(
                    "Delivery of %s to %s in room %s failed",
                    message["type"],
                    sid,
                    room_id,
                    exc_info=True,
                )
                continue
            delivered += 1
        logger.debug(
            "Broadcast %s to room %s: %s deliveries",
            message["type"],
            room_id,
            delivered,
        )
        return delivered

    async def broadcast_event(self, room_id: str | None, event: UpdateEvent) -> int:
        return await self.broadcast(room_id, event.type, event.data)


_hub: NotificationHub | None = None
_hub_lock = threading.Lock()


def install(hub: NotificationHub) -> NotificationHub:
    global _hub  # noqa: PLW0603
    with _hub_lock:
        if _hub is not None:
            msg = "The realtime hub is already initialized"
            raise HubAlreadyInitialized(msg)
        _hub = hub
    return hub


def get_hub() -> NotificationHub:
    hub = _hub
    if hub is None:
        msg = "The realtime hub is not initialized"
        raise HubUninitialized(msg)
    return hub


def is_initialized() -> bool:
    return _hub is not None


def shutdown() -> None:
    """Drop the process-wide hub (process exit, or between tests)."""

    global _hub  # noqa: PLW0603
    with _hub_lock:
        _hub = None


async def broadcast(
    room_id: str | None,
    event_type: UpdateType | str,
    payload: Any = None,
) -> int:
    """Broadcast through the process-wide hub; raises ``HubUninitialized``."""

    return await get_hub().broadcast(room_id, event_type, payload)
