"""Pytest fixtures: an in-memory SQLite friend graph per test."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.auth.dependencies import ActorIdentity
from app.api.friends.models import Friend, IncomingRequest, OutgoingRequest  # noqa: F401
from app.api.friends.service import FriendshipService
from app.api.friends.store import FriendGraphStore
from app.api.notifications.models import Notification  # noqa: F401
from app.api.notifications.service import NotificationService
from app.api.profile.models import User
from app.database.database import Base
from app.database.transaction import TransactionalStore

USERS = [
    ("u1", "alice", "Alice", "Martin"),
    ("u2", "bob", "Bob", "Keller"),
    ("u3", "carol", "Carol", None),
]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def transactions(session_factory):
    return TransactionalStore(session_factory, max_attempts=3, retry_backoff=0)


@pytest.fixture
def users(session_factory):
    db = session_factory()
    try:
        for user_id, username, first_name, last_name in USERS:
            db.add(User(id=user_id, username=username, first_name=first_name, last_name=last_name))
        db.commit()
    finally:
        db.close()
    return [user_id for user_id, *_ in USERS]


@pytest.fixture
def graph(transactions):
    return FriendGraphStore(transactions)


@pytest.fixture
def service_for(transactions):
    """Builds a FriendshipService acting as the given user."""

    def build(actor_id, notifier=None, graph=None):
        return FriendshipService(transactions, ActorIdentity(actor_id), graph=graph, notifier=notifier)

    return build


@pytest.fixture
def notifications_for(transactions):
    def build(actor_id):
        return NotificationService(transactions, ActorIdentity(actor_id))

    return build


@pytest.fixture
def befriend(service_for):
    """Makes two users friends through the normal request/accept path."""

    def make(first, second):
        service_for(first).send_friend_request(first, second)
        service_for(second).accept_friend_request(second, first)

    return make
