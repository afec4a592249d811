from datetime import datetime

import pytest
from starlette.websockets import WebSocketDisconnect

from backend.messenger.messaging.fanout import ChannelHub, channel_for
from backend.messenger.messaging.gateway import SqlAlchemyGateway
from backend.messenger.messaging.identity import IdentityVerifier
from backend.messenger.messaging.schemas import MessageDraft
from backend.messenger.messaging.service import MessagingService
from backend.messenger.models.message import ChatType, Message

from conftest import RecordingPublisher, auth_headers


def test_channel_keys():
    private = Message(id="m", chat_type="PRIVATE", recipient_id="b1")
    group = Message(id="m", chat_type="GROUP", group_id="g1")
    assert channel_for(private) == "private:b1"
    assert channel_for(group) == "group:g1"


def test_publish_without_subscribers_is_dropped():
    hub = ChannelHub()
    message = Message(
        id="m1", content="x", sender_id="a1", recipient_id="b1",
        chat_type="PRIVATE", timestamp=datetime(2024, 1, 1),
    )
    hub.publish(message)
    assert hub.subscriber_count("private:b1") == 0


def test_service_publishes_only_after_save(db, gateway, clock, alice, bob):
    publisher = RecordingPublisher()
    service = MessagingService(gateway, IdentityVerifier(gateway), publisher, clock=clock)

    rejected = service.send_private(
        MessageDraft(content="hi", senderId="a1", recipientId="nobody"), "alice"
    )
    accepted = service.send_private(
        MessageDraft(content="hi", senderId="a1", recipientId="b1"), "alice"
    )

    assert not rejected.ok
    assert accepted.ok
    assert [m.id for m in publisher.published] == [accepted.value.id]

    stored = gateway.find_by_id(Message, accepted.value.id)
    assert (stored.content, stored.sender_id, stored.recipient_id, stored.chat_type, stored.timestamp) == (
        "hi", "a1", "b1", ChatType.PRIVATE.value, clock.now,
    )


def test_private_subscriber_receives_the_message(live_client, alice, bob):
    token = auth_headers("bob")["Authorization"].split(" ", 1)[1]
    with live_client.websocket_connect(f"/ws/private/b1?token={token}") as ws:
        assert ws.receive_json() == {"event": "subscribed", "channel": "private:b1"}

        response = live_client.post(
            "/api/messages/private",
            json={"content": "hi", "senderId": "a1", "recipientId": "b1"},
            headers=auth_headers("alice"),
        )
        assert response.status_code == 200

        pushed = ws.receive_json()

    assert pushed["id"] == response.json()["id"]
    assert pushed["content"] == "hi"
    assert pushed["senderId"] == "a1"
    assert pushed["recipientId"] == "b1"
    assert pushed["chatType"] == "PRIVATE"


def test_group_subscriber_receives_the_message(live_client, alice, team):
    with live_client.websocket_connect("/ws/group/g1") as ws:
        ws.receive_json()
        live_client.post(
            "/api/messages/group",
            json={"content": "all hands", "senderId": "a1", "groupId": "g1"},
            headers=auth_headers("alice"),
        )
        pushed = ws.receive_json()

    assert pushed["groupId"] == "g1"
    assert pushed["content"] == "all hands"


def test_private_channel_refuses_other_users(live_client, alice, bob):
    token = auth_headers("alice")["Authorization"].split(" ", 1)[1]
    with pytest.raises(WebSocketDisconnect):
        with live_client.websocket_connect(f"/ws/private/b1?token={token}") as ws:
            ws.receive_json()

    with pytest.raises(WebSocketDisconnect):
        with live_client.websocket_connect("/ws/private/b1") as ws:
            ws.receive_json()


def test_private_subscription_does_not_hold_a_connection(tmp_path):
    from fastapi.testclient import TestClient
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker

    from backend.messenger.database.session import Base, get_session_factory
    from backend.messenger.main import app
    from backend.messenger.models.user import ChatUser

    file_engine = create_engine(
        f"sqlite:///{tmp_path / 'live.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=file_engine)
    FileSession = sessionmaker(autocommit=False, autoflush=False, bind=file_engine)
    with FileSession() as session:
        session.add(ChatUser(id="b1", username="bob", hashed_password="unused"))
        session.commit()

    app.dependency_overrides[get_session_factory] = lambda: FileSession
    try:
        client = TestClient(app)
        token = auth_headers("bob")["Authorization"].split(" ", 1)[1]
        assert file_engine.pool.checkedout() == 0
        with client.websocket_connect(f"/ws/private/b1?token={token}") as first:
            first.receive_json()
            with client.websocket_connect(f"/ws/private/b1?token={token}") as second:
                second.receive_json()
                assert file_engine.pool.checkedout() == 0
    finally:
        app.dependency_overrides.clear()
        file_engine.dispose()
