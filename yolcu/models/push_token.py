"""Push token model."""

import uuid

from sqlalchemy import (
    TIMESTAMP,
    Column,
    Enum,
    ForeignKey,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from yolcu.core.enums import DeviceType

from . import Base, utcnow


class PushToken(Base):
    __tablename__ = "push_tokens"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    token = Column(String, nullable=False)
    device_type = Column(
        Enum(DeviceType, values_callable=lambda e: [m.value for m in e]),
        nullable=True,
    )
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    # Relationships
    profile = relationship("Profile", back_populates="push_tokens")

    __table_args__ = (
        UniqueConstraint("token", name="push_tokens_token_key"),
    )

    def __repr__(self):
        return f"<PushToken(user_id={self.user_id}, device_type={self.device_type})>"
