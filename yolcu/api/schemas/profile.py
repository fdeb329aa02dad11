"""Profile and push token schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from yolcu.core.enums import DeviceType


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    display_name: str
    username: str
    avatar_url: Optional[str]
    created_at: datetime


class UpdateProfileRequest(BaseModel):
    """Only the supplied fields are changed."""

    display_name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = Field(None, max_length=2048)
    username: Optional[str] = Field(None, max_length=50)


class RegisterPushTokenRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=512)
    device_type: Optional[DeviceType] = None


class RemovePushTokenRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=512)


class PushTokenResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    token: str
    device_type: Optional[DeviceType]
    updated_at: datetime
