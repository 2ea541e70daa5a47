"""
Fan-out of state changes to sockets and push notifications.

Every method only schedules work on the background dispatcher; payloads must
already be plain JSON-ready dicts because the database session is gone by
the time the tasks run.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from app.services.dispatcher import BackgroundDispatcher, dispatcher as default_dispatcher
from app.services.firebase_service import FirebaseService, firebase_service
from app.services.realtime_service import RealtimeService, realtime_service
from app.utils.socket_events import user_room

logger = logging.getLogger(__name__)


class NotificationService:
    """Best-effort, unawaited delivery of socket events and push messages"""

    def __init__(
        self,
        realtime: Optional[RealtimeService] = None,
        push: Optional[FirebaseService] = None,
        dispatcher: Optional[BackgroundDispatcher] = None,
    ):
        self.realtime = realtime or realtime_service
        self.push = push or firebase_service
        self.dispatcher = dispatcher or default_dispatcher

    def emit(self, event: str, payload: Dict[str, Any], room: str) -> None:
        self.dispatcher.dispatch(
            self.realtime.emit(event, payload, room),
            f"socket {event} -> {room}",
        )

    def emit_to_users(self, user_ids: Iterable, event: str, payload: Dict[str, Any]) -> None:
        for user_id in user_ids:
            self.emit(event, payload, user_room(user_id))

    def push_friend_request(self, tokens: List[str], requester: Dict[str, Any], request_id: str) -> None:
        for token in tokens:
            self.dispatcher.dispatch(
                self.push.send_friend_request_notification(token, requester, request_id),
                "push friend_request",
            )

    def push_friend_request_accepted(self, tokens: List[str], accepter: Dict[str, Any]) -> None:
        for token in tokens:
            self.dispatcher.dispatch(
                self.push.send_friend_request_accepted_notification(token, accepter),
                "push friend_request_accepted",
            )

    def push_message(
        self, tokens: List[str], sender_name: str, content: str, data: Dict[str, Any]
    ) -> None:
        for token in tokens:
            self.dispatcher.dispatch(
                self.push.send_message_notification(token, sender_name, content, data),
                "push message",
            )


notification_service = NotificationService()
