"""
Socket.IO transport for real-time events.

Each authenticated client is placed in its ``user:{id}`` room on connect and
may join the shared ``locations`` / ``friends`` / ``messages`` rooms.
"""
import logging
from typing import Any, Dict, Optional
from urllib.parse import parse_qs

import socketio

from app.core.config import settings
from app.core.security import decode_access_token
from app.utils import socket_events

logger = logging.getLogger(__name__)


def _token_from(environ: dict, auth: Optional[dict]) -> Optional[str]:
    if auth and auth.get("token"):
        return auth["token"]
    query = parse_qs(environ.get("QUERY_STRING", ""))
    values = query.get("token")
    return values[0] if values else None


class RealtimeNamespace(socketio.AsyncNamespace):
    """Default namespace; keeps each client in its personal room."""

    def __init__(self, namespace: str = "/") -> None:
        super().__init__(namespace)
        self._sessions: Dict[str, str] = {}

    async def trigger_event(self, event: str, *args):
        # "join:locations" is dispatched to on_join_locations
        return await super().trigger_event(event.replace(":", "_"), *args)

    async def on_connect(self, sid: str, environ: dict, auth: Optional[dict] = None) -> None:
        token = _token_from(environ, auth)
        if not token:
            raise ConnectionRefusedError("No token provided")
        try:
            user_id = str(decode_access_token(token)["sub"])
        except ValueError:
            raise ConnectionRefusedError("Invalid token")

        self._sessions[sid] = user_id
        await self.enter_room(sid, socket_events.user_room(user_id))
        logger.debug(f"Socket {sid} connected for user {user_id}")

    async def on_disconnect(self, sid: str, *args) -> None:
        user_id = self._sessions.pop(sid, None)
        if user_id:
            await self.leave_room(sid, socket_events.user_room(user_id))
        logger.debug(f"Socket {sid} disconnected")

    async def _join(self, sid: str, room: str) -> None:
        if sid not in self._sessions:
            raise ConnectionRefusedError("unauthenticated")
        await self.enter_room(sid, room)

    async def on_join_locations(self, sid: str, *args) -> None:
        await self._join(sid, socket_events.LOCATIONS_ROOM)

    async def on_leave_locations(self, sid: str, *args) -> None:
        await self.leave_room(sid, socket_events.LOCATIONS_ROOM)

    async def on_join_friends(self, sid: str, *args) -> None:
        await self._join(sid, socket_events.FRIENDS_ROOM)

    async def on_leave_friends(self, sid: str, *args) -> None:
        await self.leave_room(sid, socket_events.FRIENDS_ROOM)

    async def on_join_messages(self, sid: str, *args) -> None:
        await self._join(sid, socket_events.MESSAGES_ROOM)

    async def on_leave_messages(self, sid: str, *args) -> None:
        await self.leave_room(sid, socket_events.MESSAGES_ROOM)


class RealtimeService:
    """Thin emit API over the Socket.IO server used by the fan-out."""

    def __init__(self, server: socketio.AsyncServer):
        self.server = server

    async def emit(self, event: str, payload: Dict[str, Any], room: str) -> None:
        logger.debug(f"Emitting {event} to {room}")
        await self.server.emit(event, payload, room=room)

    async def emit_to_user(self, user_id, event: str, payload: Dict[str, Any]) -> None:
        await self.emit(event, payload, socket_events.user_room(user_id))


sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins="*" if settings.CORS_ORIGINS == ["*"] else settings.CORS_ORIGINS,
)
sio.register_namespace(RealtimeNamespace())

realtime_service = RealtimeService(sio)
