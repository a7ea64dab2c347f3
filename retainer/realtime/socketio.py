"""Socket.IO server behind the live retainer dashboards.

Frontend convention:
- URL base: ws://<host>:8000
- Socket.IO path: /socket.io/ (the client library default)
- After connecting, the dashboard emits ``join-room`` with the client slug and
  then receives ``retainer-update`` events for that client.

Joining a room needs no credentials: anyone holding a slug can watch that
client's public balance, the same as loading the public dashboard.
"""

from __future__ import annotations

import logging

import socketio
from django.conf import settings

from retainer.realtime.hub import NotificationHub
from retainer.realtime.hub import install

logger = logging.getLogger(__name__)

JOIN_ROOM_EVENT = "join-room"
TRANSPORTS = ["polling", "websocket"]


def allowed_origins() -> list[str]:
    origins = list(getattr(settings, "REALTIME_ALLOWED_ORIGINS", []))
    frontend_url = getattr(settings, "FRONTEND_URL", "")
    if frontend_url and frontend_url not in origins:
        origins.append(frontend_url)
    return origins


def create_server() -> socketio.AsyncServer:
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=allowed_origins(),
        cors_credentials=True,
        transports=TRANSPORTS,
        logger=False,
        engineio_logger=False,
    )


def initialize(server: socketio.AsyncServer | None = None) -> NotificationHub:
    """Bind the process-wide hub to ``server`` and register its handlers.

    Must run exactly once per process; a second call raises
    ``HubAlreadyInitialized`` without touching the first hub.
    """

    if server is None:
        server = create_server()
    hub = install(NotificationHub(server))

    server.on("connect", hub.on_connect)
    server.on(JOIN_ROOM_EVENT, hub.on_join_room)
    server.on("disconnect", hub.on_disconnect)
    server.on("*", hub.on_other_event)

    logger.info("Realtime hub initialized (origins: %s)", ", ".join(allowed_origins()))
    return hub
