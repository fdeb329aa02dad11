"""Room API request/response schemas."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# Request Models
class CreateRoomRequest(BaseModel):
    """Request model for creating a room."""

    name: str = Field(..., min_length=1, max_length=255, description="Room name")
    invite_code: Optional[str] = Field(
        None,
        min_length=4,
        max_length=32,
        description="Custom invite code; generated when omitted",
    )


class JoinRoomRequest(BaseModel):
    """Request model for joining a room by invite code."""

    code: str = Field(..., max_length=64, description="Invite code shared by a member")


class SetLiveRequest(BaseModel):
    """Request model for toggling a room's call session flag."""

    is_live: bool


# Response Models
class RoomResponse(BaseModel):
    """Room information."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    created_by: uuid.UUID
    created_at: datetime
    invite_code: Optional[str]
    is_live: bool


class RoomListResponse(BaseModel):
    """Rooms the current user belongs to."""

    rooms: List[RoomResponse]
    total: int


class JoinRoomResponse(BaseModel):
    """Outcome of a join-by-code request."""

    status: str = Field(..., description="'joined' or 'already_member'")
    room_id: uuid.UUID
    already_member: bool


class MemberProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    display_name: str
    username: str
    avatar_url: Optional[str]


class MemberResponse(BaseModel):
    """A room membership with the member's public profile."""

    user_id: uuid.UUID
    joined_at: datetime
    is_creator: bool
    profile: MemberProfile


class RoomMembersResponse(BaseModel):
    room_id: uuid.UUID
    members: List[MemberResponse]
    total: int


class CallTokenResponse(BaseModel):
    """Credentials for joining the room's call session."""

    token: str
    url: str
