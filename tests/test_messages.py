from datetime import timedelta
from uuid import uuid4

import pytest

from conftest import auth_headers
from app.core.exceptions import Forbidden, InvalidArgument, NotFound
from app.models.message import Message
from app.services.message_service import message_service
from app.services.social_service import social_service
from app.utils import socket_events
from app.utils.time_utils import utc_now


@pytest.fixture
def friends(db, make_user):
    alice, bob = make_user("Alice"), make_user("Bob")
    request, _ = social_service.send_friend_request(db, alice, bob.id)
    social_service.accept_friend_request(db, bob, request.id)
    return alice, bob


def test_send_requires_friendship(db, make_user):
    alice, bob = make_user(), make_user()
    with pytest.raises(Forbidden):
        message_service.send_message(db, alice, bob.id, "hi")


def test_send_validation(db, friends):
    alice, bob = friends
    with pytest.raises(InvalidArgument):
        message_service.send_message(db, alice, bob.id, "   ")
    with pytest.raises(InvalidArgument):
        message_service.send_message(db, alice, alice.id, "hi")
    with pytest.raises(NotFound):
        message_service.send_message(db, alice, uuid4(), "hi")


def test_send_trims_and_fans_out(db, friends, notifier):
    alice, bob = friends
    notifier.reset_mock()

    sent = message_service.send_message(db, alice, bob.id, "  hello bob  ")

    assert sent.content == "hello bob"
    assert sent.sender.name == "Alice"
    assert sent.read is False

    room_call = notifier.emit.call_args
    assert room_call.args[0] == socket_events.MESSAGE_SENT
    assert room_call.args[2] == socket_events.MESSAGES_ROOM
    users_call = notifier.emit_to_users.call_args
    assert set(users_call.args[0]) == {alice.id, bob.id}
    assert users_call.args[2]["recipientId"] == str(bob.id)

    tokens, sender_name, content, data = notifier.push_message.call_args.args
    assert sender_name == "Alice"
    assert content == "hello bob"
    assert data["messageId"] == str(sent.id)


def test_conversation_is_oldest_first_and_capped(db, friends):
    alice, bob = friends
    start = utc_now() - timedelta(hours=1)
    for i in range(55):
        db.add(Message(sender_id=alice.id, recipient_id=bob.id, content=f"m{i}",
                       created_at=start + timedelta(seconds=i)))
    db.commit()

    messages = message_service.get_conversation(db, bob, alice.id)

    assert len(messages) == 50
    assert messages[0].content == "m5"
    assert messages[-1].content == "m54"


def test_conversation_requires_friendship(db, make_user):
    alice, bob = make_user(), make_user()
    with pytest.raises(Forbidden):
        message_service.get_conversation(db, alice, bob.id)


def test_mark_as_read_is_idempotent(db, friends, notifier):
    alice, bob = friends
    message_service.send_message(db, alice, bob.id, "one")
    message_service.send_message(db, alice, bob.id, "two")
    message_service.send_message(db, bob, alice.id, "reply")

    assert message_service.get_unread_count(db, bob) == 2
    assert message_service.mark_as_read(db, bob, alice.id) == 2
    assert message_service.mark_as_read(db, bob, alice.id) == 0
    assert message_service.get_unread_count(db, bob) == 0
    assert message_service.get_unread_count(db, alice) == 1

    read = db.query(Message).filter(Message.recipient_id == bob.id).all()
    assert all(m.read and m.read_at is not None for m in read)
    assert notifier.emit.call_args.args[0] == socket_events.MESSAGES_READ


def test_conversations_summary(db, friends, make_user):
    alice, bob = friends
    carol = make_user("Carol")
    request, _ = social_service.send_friend_request(db, carol, alice.id)
    social_service.accept_friend_request(db, alice, request.id)

    start = utc_now() - timedelta(minutes=10)
    db.add_all([
        Message(sender_id=bob.id, recipient_id=alice.id, content="b1", created_at=start),
        Message(sender_id=bob.id, recipient_id=alice.id, content="b2", created_at=start + timedelta(minutes=1)),
        Message(sender_id=alice.id, recipient_id=carol.id, content="c1", created_at=start + timedelta(minutes=2)),
    ])
    db.commit()

    conversations = message_service.get_conversations(db, alice)

    assert [c.user.name for c in conversations] == ["Carol", "Bob"]
    assert conversations[0].unread_count == 0
    assert conversations[1].unread_count == 2
    assert conversations[1].last_message.content == "b2"


def test_messages_api(client, friends):
    alice, bob = friends

    sent = client.post("/api/messages", json={"recipientId": str(bob.id), "content": "hey"},
                       headers=auth_headers(alice))
    assert sent.status_code == 200
    assert sent.json()["message"]["content"] == "hey"
    assert sent.json()["message"]["sender"]["id"] == str(alice.id)

    unread = client.get("/api/messages/unread/count", headers=auth_headers(bob)).json()
    assert unread["count"] == 1

    conversation = client.get(f"/api/messages/{alice.id}", headers=auth_headers(bob)).json()
    assert conversation["count"] == 1

    marked = client.put(f"/api/messages/{alice.id}/read", headers=auth_headers(bob)).json()
    assert marked == {"success": True, "message": "Messages marked as read", "count": 1}

    listing = client.get("/api/messages", headers=auth_headers(bob)).json()
    assert listing["conversations"][0]["unreadCount"] == 0
