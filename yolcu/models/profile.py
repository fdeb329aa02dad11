"""Profile model."""

from sqlalchemy import TIMESTAMP, CheckConstraint, Column, String, Uuid
from sqlalchemy.orm import relationship

from . import Base, utcnow

DEFAULT_DISPLAY_NAME = "New User"
USERNAME_PATTERN = r"^[a-z0-9_]+$"


class Profile(Base):
    """Public profile of an identity issued by the auth provider."""

    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True)
    display_name = Column(String, nullable=False, default=DEFAULT_DISPLAY_NAME)
    avatar_url = Column(String, nullable=True)
    username = Column(String, nullable=False, unique=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    # Relationships
    memberships = relationship(
        "RoomMember", back_populates="profile", passive_deletes=True
    )
    push_tokens = relationship(
        "PushToken", back_populates="profile", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint("length(display_name) > 0", name="profiles_display_name_set"),
    )

    @staticmethod
    def default_username(user_id) -> str:
        """Username assigned on first sight: ``user_`` plus the id's first 8 chars."""
        return f"user_{str(user_id)[:8]}"

    def __repr__(self):
        return f"<Profile(id={self.id}, username='{self.username}')>"
