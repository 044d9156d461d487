"""Trip chat rooms and live notifications over Socket.IO.

Events from clients:

- ``user:join`` (userId): announce which user owns the connection
- ``trip:join`` / ``trip:leave`` (tripId): enter or leave ``trip:<tripId>``;
  the rest of the room gets ``user:joined`` / ``user:left``
- ``message:send`` ({tripId, message}): ``message:new`` to the whole room,
  sender included, stamped with the server time
- ``typing:start`` / ``typing:stop`` ({tripId, userId, userName}):
  ``user:typing`` / ``user:stopped-typing`` to the rest of the room
- ``request:new`` ({organizerId, request}): ``request:notification`` to the
  organizer, if connected
- ``request:response`` ({userId, response}): ``request:status-update`` to
  the requester, if connected

Delivery is best effort. Nothing is queued for offline users; the REST API
holds the durable record. Malformed or out-of-order events are logged and
dropped, never raised.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from realtime.presence import PresenceRegistry
from utils.dates import iso, utc_now

logger = logging.getLogger(__name__)


def room_for_trip(trip_id: Any) -> str:
    return f"trip:{trip_id}"


def _field(data: Any, key: str) -> Any:
    return data.get(key) if isinstance(data, dict) else None


class TripRelay:
    """Event handlers bound to a Socket.IO server and a presence registry.

    ``server`` only needs ``enter_room``, ``leave_room`` and ``emit`` with the
    ``socketio.AsyncServer`` signatures.
    """

    def __init__(self, server, presence: PresenceRegistry, clock: Callable = utc_now):
        self.server = server
        self.presence = presence
        self._clock = clock

    def register(self) -> None:
        handlers = {
            "connect": self.on_connect,
            "disconnect": self.on_disconnect,
            "user:join": self.on_user_join,
            "trip:join": self.on_trip_join,
            "trip:leave": self.on_trip_leave,
            "message:send": self.on_message_send,
            "typing:start": self.on_typing_start,
            "typing:stop": self.on_typing_stop,
            "request:new": self.on_request_new,
            "request:response": self.on_request_response,
        }
        for event, handler in handlers.items():
            self.server.on(event, handler)

    def _timestamp(self) -> str:
        return iso(self._clock())

    async def on_connect(self, sid: str, environ: Any = None, auth: Any = None):
        logger.info("New client connected: %s", sid)

    async def on_disconnect(self, sid: str, reason: Any = None):
        user_id = self.presence.release(sid)
        if user_id is not None:
            logger.info("User %s disconnected", user_id)
        logger.info("Client disconnected: %s", sid)

    async def on_user_join(self, sid: str, user_id: Any = None):
        if user_id is None or user_id == "" or isinstance(user_id, (dict, list)):
            logger.warning("Ignoring user:join with invalid user id from %s", sid)
            return
        self.presence.announce(user_id, sid)
        logger.info("User %s connected with socket %s", user_id, sid)

    async def on_trip_join(self, sid: str, trip_id: Any = None):
        if trip_id is None or isinstance(trip_id, (dict, list)):
            logger.warning("Ignoring trip:join without trip id from %s", sid)
            return
        room = room_for_trip(trip_id)
        await self.server.enter_room(sid, room)
        logger.info("Socket %s joined trip room: %s", sid, trip_id)
        await self.server.emit(
            "user:joined",
            {"userId": self.presence.user_for(sid), "timestamp": self._timestamp()},
            to=room,
            skip_sid=sid,
        )

    async def on_trip_leave(self, sid: str, trip_id: Any = None):
        if trip_id is None or isinstance(trip_id, (dict, list)):
            logger.warning("Ignoring trip:leave without trip id from %s", sid)
            return
        room = room_for_trip(trip_id)
        await self.server.leave_room(sid, room)
        logger.info("Socket %s left trip room: %s", sid, trip_id)
        await self.server.emit(
            "user:left",
            {"userId": self.presence.user_for(sid), "timestamp": self._timestamp()},
            to=room,
            skip_sid=sid,
        )

    async def on_message_send(self, sid: str, data: Any = None):
        trip_id, message = _field(data, "tripId"), _field(data, "message")
        if trip_id is None or not isinstance(message, dict):
            logger.warning("Ignoring malformed message:send from %s", sid)
            return
        await self.server.emit(
            "message:new",
            {**message, "timestamp": self._timestamp()},
            to=room_for_trip(trip_id),
        )
        logger.debug("Message sent to trip %s", trip_id)

    async def on_typing_start(self, sid: str, data: Any = None):
        trip_id = _field(data, "tripId")
        if trip_id is None:
            return
        payload = {"userId": data.get("userId")}
        if data.get("userName") is not None:
            payload["userName"] = data["userName"]
        await self.server.emit("user:typing", payload, to=room_for_trip(trip_id), skip_sid=sid)

    async def on_typing_stop(self, sid: str, data: Any = None):
        trip_id = _field(data, "tripId")
        if trip_id is None:
            return
        await self.server.emit(
            "user:stopped-typing",
            {"userId": data.get("userId")},
            to=room_for_trip(trip_id),
            skip_sid=sid,
        )

    async def on_request_new(self, sid: str, data: Any = None):
        organizer_id, request = _field(data, "organizerId"), _field(data, "request")
        if await self.notify_user(organizer_id, "request:notification", request):
            logger.info("Request notification sent to organizer %s", organizer_id)

    async def on_request_response(self, sid: str, data: Any = None):
        user_id, response = _field(data, "userId"), _field(data, "response")
        if await self.notify_user(user_id, "request:status-update", response):
            logger.info("Request response sent to user %s", user_id)

    async def notify_user(self, user_id: Any, event: str, payload: Any) -> bool:
        """Deliver ``payload`` to the user's live connection. Returns False,
        without error, when the user is not connected."""
        target: Optional[str] = self.presence.sid_for(user_id)
        if target is None:
            logger.debug("Dropping %s for offline user %s", event, user_id)
            return False
        await self.server.emit(event, payload, to=target)
        return True
