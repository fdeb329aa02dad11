"""SQLAlchemy models for Yolcu Chat."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import declarative_base

# Create the declarative base
Base: Any = declarative_base()


def utcnow() -> datetime:
    """Timezone-aware column default with sub-second resolution."""
    return datetime.now(timezone.utc)


# Import all models so they're registered with Base.metadata
from .membership import RoomMember  # noqa: E402
from .message import Message  # noqa: E402
from .profile import Profile  # noqa: E402
from .push_token import PushToken  # noqa: E402
from .room import Room  # noqa: E402

__all__ = [
    "Base",
    "Profile",
    "Room",
    "RoomMember",
    "Message",
    "PushToken",
]
