"""Room membership model."""

from sqlalchemy import TIMESTAMP, Column, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship

from . import Base, utcnow


class RoomMember(Base):
    __tablename__ = "room_members"

    # The (room_id, user_id) primary key is the one-membership-per-user invariant
    room_id = Column(
        Uuid, ForeignKey("rooms.id", ondelete="CASCADE"), primary_key=True
    )
    user_id = Column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True
    )
    joined_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    # Relationships
    room = relationship("Room", back_populates="memberships")
    profile = relationship("Profile", back_populates="memberships")

    __table_args__ = (
        Index("ix_room_members_user_id", "user_id"),  # For "my rooms" lookup
    )

    def __repr__(self):
        return f"<RoomMember(room_id={self.room_id}, user_id={self.user_id})>"
