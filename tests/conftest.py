"""Main conftest.py shared by all test packages."""

import os
from datetime import timedelta
from unittest.mock import AsyncMock, Mock
from uuid import UUID, uuid4

# Set test environment variables before the application reads its settings
os.environ.setdefault("APP_DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret-key-for-testing-only")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("REDIS_HOST", "localhost")
os.environ.setdefault("RABBITMQ_HOST", "localhost")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from tests.helpers.auth_helper import get_auth_headers  # noqa: E402
from tests.helpers.data import BASE_TIME  # noqa: E402
from yolcu.core.authorization import Actor  # noqa: E402
from yolcu.dependencies import (  # noqa: E402
    get_event_publisher,
    get_rate_limiter,
    get_session_factory,
)
from yolcu.main import app  # noqa: E402
from yolcu.models import (  # noqa: E402
    Base,
    Message,
    Profile,
    PushToken,
    Room,
    RoomMember,
)
from yolcu.repositories import (  # noqa: E402
    MessageRepo,
    ProfileRepo,
    PushTokenRepo,
    RoomRepo,
)
from yolcu.services.events import RoomEventPublisher  # noqa: E402
from yolcu.services.message_service import MessageService  # noqa: E402
from yolcu.services.room_service import RoomService  # noqa: E402

# Test database configuration; in-memory SQLite unless a server is provided
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")


def _create_sqlite_engine():
    """One shared in-memory connection with foreign keys and SAVEPOINT support."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself so savepoints work
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


@pytest.fixture(scope="session")
def test_engine():
    """Create test database engine and tables once per session."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = _create_sqlite_engine()
    else:
        engine = create_engine(TEST_DATABASE_URL)
        Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="session")
def test_session_factory(test_engine):
    """Create session factory for tests."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine,
        expire_on_commit=False,  # Prevent DetachedInstanceError
    )


@pytest.fixture
def test_session(test_session_factory):
    """Create a clean database session for each test."""
    session = test_session_factory()
    try:
        yield session
    finally:
        # Rollback any uncommitted changes and close
        session.rollback()
        session.close()


@pytest.fixture(autouse=True)
def clean_db(test_session):
    """Automatically clean database state before each test."""
    # Delete all data in reverse dependency order
    test_session.query(Message).delete()
    test_session.query(RoomMember).delete()
    test_session.query(PushToken).delete()
    test_session.query(Room).delete()
    test_session.query(Profile).delete()
    test_session.commit()


@pytest.fixture
def count_rows(test_session_factory):
    """Count rows of a model in a short-lived session."""

    def _count(model, **filters):
        with test_session_factory() as session:
            return session.query(model).filter_by(**filters).count()

    return _count


# Repository fixtures
@pytest.fixture
def room_repo(test_session_factory):
    """RoomRepo instance with test session factory."""
    return RoomRepo(test_session_factory)


@pytest.fixture
def message_repo(test_session_factory):
    """MessageRepo instance with test session factory."""
    return MessageRepo(test_session_factory)


@pytest.fixture
def profile_repo(test_session_factory):
    """ProfileRepo instance with test session factory."""
    return ProfileRepo(test_session_factory)


@pytest.fixture
def push_token_repo(test_session_factory):
    """PushTokenRepo instance with test session factory."""
    return PushTokenRepo(test_session_factory)


# Service fixtures
@pytest.fixture
def publisher():
    """Event publisher that records calls instead of talking to RabbitMQ."""
    return Mock(spec=RoomEventPublisher)


@pytest.fixture
def room_service(room_repo, publisher):
    return RoomService(room_repo, publisher)


@pytest.fixture
def message_service(message_repo, room_repo, publisher):
    return MessageService(message_repo, room_repo, publisher)


# Test data factories
@pytest.fixture
def sample_profiles(test_session):
    """Create alice, bob and charlie."""
    profiles = [
        Profile(id=uuid4(), display_name="Alice", username="alice"),
        Profile(id=uuid4(), display_name="Bob", username="bob"),
        Profile(id=uuid4(), display_name="Charlie", username="charlie"),
    ]
    test_session.add_all(profiles)
    test_session.commit()
    return profiles


@pytest.fixture
def actor_for():
    """Build an Actor for a profile."""

    def _actor(profile) -> Actor:
        return Actor(user_id=UUID(str(profile.id)))

    return _actor


@pytest.fixture
def sample_room(test_session, sample_profiles):
    """The "Hiking" room created by alice, with alice and bob as members."""
    alice, bob, _ = sample_profiles
    room = Room(name="Hiking", created_by=alice.id, invite_code="hike2024")
    test_session.add(room)
    test_session.flush()

    test_session.add_all(
        [
            RoomMember(room_id=room.id, user_id=alice.id, joined_at=BASE_TIME),
            RoomMember(
                room_id=room.id,
                user_id=bob.id,
                joined_at=BASE_TIME + timedelta(minutes=5),
            ),
        ]
    )
    test_session.commit()
    return room


@pytest.fixture
def sample_messages(test_session, sample_room, sample_profiles):
    """Five messages in the sample room at 10 minute intervals."""
    alice, bob, _ = sample_profiles
    messages = []
    for i in range(5):
        message = Message(
            room_id=sample_room.id,
            user_id=alice.id if i % 2 == 0 else bob.id,
            content=f"Test message {i + 1}",
            created_at=BASE_TIME + timedelta(minutes=10 * (i + 1)),
        )
        messages.append(message)
        test_session.add(message)
    test_session.commit()
    return messages


# API fixtures
@pytest.fixture
def api_publisher():
    return Mock(spec=RoomEventPublisher)


@pytest.fixture
def api_rate_limiter():
    limiter = Mock()
    limiter.check_user_rate_limit = AsyncMock(return_value=True)
    return limiter


@pytest.fixture
def client(test_session_factory, api_publisher, api_rate_limiter):
    """Test client wired to the test database, with broker and Redis stubbed."""
    app.dependency_overrides[get_session_factory] = lambda: test_session_factory
    app.dependency_overrides[get_event_publisher] = lambda: api_publisher
    app.dependency_overrides[get_rate_limiter] = lambda: api_rate_limiter
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers_for_user():
    """Authorization headers for a profile or user id."""

    def _headers(user) -> dict:
        return get_auth_headers(user)

    return _headers
