"""Message model."""

import uuid

from sqlalchemy import (
    TIMESTAMP,
    BigInteger,
    Column,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from . import Base, utcnow


class Message(Base):
    __tablename__ = "messages"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    room_id = Column(
        Uuid, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False)
    content = Column(Text, nullable=False, default="")
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    # Optional attachment; the bytes live in object storage
    file_path = Column(String, nullable=True)
    file_name = Column(String, nullable=True)
    file_type = Column(String, nullable=True)
    file_size = Column(BigInteger, nullable=True)

    # Relationships
    room = relationship("Room", back_populates="messages")
    author = relationship("Profile")

    __table_args__ = (
        Index("ix_messages_room_created", "room_id", "created_at"),  # Timeline paging
    )

    @property
    def has_attachment(self) -> bool:
        return self.file_path is not None

    def __repr__(self):
        return f"<Message(id={self.id}, room_id={self.room_id}, user_id={self.user_id})>"
