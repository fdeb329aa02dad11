"""Room model."""

import uuid

from sqlalchemy import TIMESTAMP, Boolean, Column, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from . import Base, utcnow


class Room(Base):
    """Named chat space with one creator and any number of members."""

    __tablename__ = "rooms"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    created_by = Column(Uuid, ForeignKey("profiles.id"), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    invite_code = Column(String(32), nullable=True, unique=True)
    is_live = Column(Boolean, nullable=False, default=False)

    # Relationships
    creator = relationship("Profile", foreign_keys=[created_by])
    memberships = relationship(
        "RoomMember",
        back_populates="room",
        cascade="all, delete-orphan",
    )
    messages = relationship(
        "Message",
        back_populates="room",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Room(id={self.id}, name='{self.name}', invite_code='{self.invite_code}')>"
