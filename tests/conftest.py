import os

# keep the application's import-time engine off the local disk
os.environ.setdefault("SQLALCHEMY_DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta
from typing import List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.messenger.database.session import Base, get_db, get_session_factory
from backend.messenger.main import app
from backend.messenger.messaging.deps import get_publisher
from backend.messenger.messaging.gateway import SqlAlchemyGateway
from backend.messenger.messaging.identity import IdentityVerifier
from backend.messenger.models.group import ChatGroup, ChatUserGroup
from backend.messenger.models.message import Message
from backend.messenger.models.user import ChatUser
from backend.messenger.utils.security import create_access_token

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FixedClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class RecordingPublisher:
    def __init__(self):
        self.published: List[Message] = []

    def publish(self, message: Message) -> None:
        self.published.append(message)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def gateway(db):
    return SqlAlchemyGateway(db)


@pytest.fixture
def identity(gateway):
    return IdentityVerifier(gateway)


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 5, 1, 12, 0, 0))


@pytest.fixture
def publisher():
    return RecordingPublisher()


def make_user(gateway, user_id: str, username: str) -> ChatUser:
    return gateway.save(ChatUser(id=user_id, username=username, hashed_password="unused"))


@pytest.fixture
def alice(gateway):
    return make_user(gateway, "a1", "alice")


@pytest.fixture
def bob(gateway):
    return make_user(gateway, "b1", "bob")


@pytest.fixture
def carol(gateway):
    return make_user(gateway, "c1", "carol")


@pytest.fixture
def team(gateway, alice, bob):
    """Group 'team' with alice as its only member."""
    group = gateway.save(ChatGroup(id="g1", name="team"))
    gateway.save(ChatUserGroup(user_id=alice.id, group_id=group.id))
    return group


def auth_headers(username: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(data={'sub': username})}"}


@pytest.fixture
def client(db, publisher):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_publisher] = lambda: publisher
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def live_client(db):
    """Client wired to the real WebSocket channel hub."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSession
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
