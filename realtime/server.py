from typing import List

import socketio

from realtime.presence import PresenceRegistry
from realtime.relay import TripRelay


def create_socket_server(cors_origins: List[str]) -> TripRelay:
    """Build the Socket.IO server with a fresh presence table and every
    relay handler registered. The server is ``relay.server``."""
    sio = socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=cors_origins,
        logger=False,
        engineio_logger=False,
    )
    relay = TripRelay(sio, PresenceRegistry())
    relay.register()
    return relay
