"""Socket.IO server construction."""

import socketio

from app.core.config import settings


def create_socket_server() -> socketio.AsyncServer:
    """Create the ASGI Socket.IO server used for presence and chat relay."""
    origins = "*" if settings.app.is_development else list(settings.server.cors_origins)
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=origins,
        async_handlers=True,
        logger=settings.app.debug,
        engineio_logger=False,
    )
