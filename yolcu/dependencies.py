"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import sessionmaker

from yolcu.core.messaging.broker import get_message_broker
from yolcu.core.rate_limiter import RateLimiter, rate_limiter
from yolcu.db.db import get_session_local
from yolcu.repositories.message_repo import MessageRepo
from yolcu.repositories.profile_repo import ProfileRepo
from yolcu.repositories.push_token_repo import PushTokenRepo
from yolcu.repositories.room_repo import RoomRepo
from yolcu.services.call_token_service import CallTokenService
from yolcu.services.events import RoomEventPublisher
from yolcu.services.message_service import MessageService
from yolcu.services.profile_service import ProfileService
from yolcu.services.push_token_service import PushTokenService
from yolcu.services.room_service import RoomService


def get_session_factory() -> sessionmaker:
    """Session factory shared by every repository."""
    return get_session_local()


SessionFactory = Annotated[sessionmaker, Depends(get_session_factory)]


def get_room_repo(session_factory: SessionFactory) -> RoomRepo:
    """Get RoomRepo instance with session factory."""
    return RoomRepo(session_factory)


def get_message_repo(session_factory: SessionFactory) -> MessageRepo:
    """Get MessageRepo instance with session factory."""
    return MessageRepo(session_factory)


def get_profile_repo(session_factory: SessionFactory) -> ProfileRepo:
    """Get ProfileRepo instance with session factory."""
    return ProfileRepo(session_factory)


def get_push_token_repo(session_factory: SessionFactory) -> PushTokenRepo:
    """Get PushTokenRepo instance with session factory."""
    return PushTokenRepo(session_factory)


def get_event_publisher() -> RoomEventPublisher:
    """Get the room event publisher backed by the global broker."""
    return RoomEventPublisher(get_message_broker)


def get_rate_limiter() -> RateLimiter:
    """Get the global rate limiter."""
    return rate_limiter


def get_room_service(
    room_repo: Annotated[RoomRepo, Depends(get_room_repo)],
    publisher: Annotated[RoomEventPublisher, Depends(get_event_publisher)],
) -> RoomService:
    """Get RoomService instance with dependencies."""
    return RoomService(room_repo, publisher)


def get_message_service(
    message_repo: Annotated[MessageRepo, Depends(get_message_repo)],
    room_repo: Annotated[RoomRepo, Depends(get_room_repo)],
    publisher: Annotated[RoomEventPublisher, Depends(get_event_publisher)],
) -> MessageService:
    """Get MessageService instance with dependencies."""
    return MessageService(message_repo, room_repo, publisher)


def get_profile_service(
    profile_repo: Annotated[ProfileRepo, Depends(get_profile_repo)],
) -> ProfileService:
    """Get ProfileService instance with dependencies."""
    return ProfileService(profile_repo)


def get_push_token_service(
    push_token_repo: Annotated[PushTokenRepo, Depends(get_push_token_repo)],
) -> PushTokenService:
    """Get PushTokenService instance with dependencies."""
    return PushTokenService(push_token_repo)


def get_call_token_service(
    room_repo: Annotated[RoomRepo, Depends(get_room_repo)],
    profile_repo: Annotated[ProfileRepo, Depends(get_profile_repo)],
) -> CallTokenService:
    """Get CallTokenService instance with dependencies."""
    return CallTokenService(room_repo, profile_repo)
