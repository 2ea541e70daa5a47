from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.security import create_access_token
from app.models.notification import NotificationType
from app.services.dispatcher import BackgroundDispatcher
from app.services.firebase_service import FirebaseService
from app.services.notification_service import NotificationService
from app.services.realtime_service import RealtimeNamespace
from app.utils import socket_events


@pytest.mark.asyncio
async def test_dispatcher_logs_failures_without_raising(caplog):
    dispatcher = BackgroundDispatcher()
    done = []

    async def ok():
        done.append("ok")

    async def boom():
        raise RuntimeError("push provider down")

    dispatcher.dispatch(boom(), "boom")
    dispatcher.dispatch(ok(), "ok")
    await dispatcher.drain()

    assert done == ["ok"]
    assert dispatcher.pending == 0
    assert "push provider down" in caplog.text


def test_dispatcher_without_loop_drops_work():
    dispatcher = BackgroundDispatcher()
    coro = AsyncMock()()
    assert dispatcher.dispatch(coro, "no loop") is None


@pytest.mark.asyncio
async def test_notification_service_targets_user_rooms():
    realtime = MagicMock()
    realtime.emit = AsyncMock()
    push = MagicMock()
    push.send_friend_request_notification = AsyncMock(return_value=True)
    dispatcher = BackgroundDispatcher()
    service = NotificationService(realtime=realtime, push=push, dispatcher=dispatcher)

    service.emit_to_users(["u1", "u2"], socket_events.FRIEND_ADDED, {"x": 1})
    service.push_friend_request(["tok-1", "tok-2"], {"id": "u9", "name": "Alice"}, "req-1")
    await dispatcher.drain()

    rooms = [c.args[2] for c in realtime.emit.await_args_list]
    assert rooms == ["user:u1", "user:u2"]
    assert push.send_friend_request_notification.await_count == 2


@pytest.mark.asyncio
async def test_firebase_without_credentials_returns_false():
    service = FirebaseService(credentials_path="/nonexistent/firebase.json")
    sent = await service.send_notification("token", "t", "b", NotificationType.MESSAGE)
    assert sent is False


@pytest.mark.asyncio
async def test_socket_connect_requires_valid_token():
    namespace = RealtimeNamespace()
    namespace.enter_room = AsyncMock()

    with pytest.raises(ConnectionRefusedError):
        await namespace.on_connect("sid-1", {"QUERY_STRING": ""}, None)
    with pytest.raises(ConnectionRefusedError):
        await namespace.on_connect("sid-1", {}, {"token": "garbage"})


@pytest.mark.asyncio
async def test_socket_connect_joins_user_room_and_named_rooms():
    namespace = RealtimeNamespace()
    namespace.enter_room = AsyncMock()
    token = create_access_token({"sub": "3f1c8a52-0000-4000-8000-000000000001"})

    await namespace.on_connect("sid-1", {"QUERY_STRING": f"token={token}"}, None)
    await namespace.trigger_event("join:locations", "sid-1")

    rooms = [c.args[1] for c in namespace.enter_room.await_args_list]
    assert rooms == ["user:3f1c8a52-0000-4000-8000-000000000001", socket_events.LOCATIONS_ROOM]


@pytest.mark.asyncio
async def test_socket_join_requires_connection():
    namespace = RealtimeNamespace()
    namespace.enter_room = AsyncMock()

    with pytest.raises(ConnectionRefusedError):
        await namespace.on_join_friends("unknown-sid")
