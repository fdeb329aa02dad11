"""API schemas package."""

from .common import ERROR_RESPONSES, ErrorDetail, ErrorResponse
from .message import (
    AttachmentIn,
    MessageHistoryResponse,
    MessageResponse,
    SendMessageRequest,
)
from .profile import (
    ProfileResponse,
    PushTokenResponse,
    RegisterPushTokenRequest,
    RemovePushTokenRequest,
    UpdateProfileRequest,
)
from .room import (
    CallTokenResponse,
    CreateRoomRequest,
    JoinRoomRequest,
    JoinRoomResponse,
    MemberProfile,
    MemberResponse,
    RoomListResponse,
    RoomMembersResponse,
    RoomResponse,
    SetLiveRequest,
)

__all__ = [
    "ERROR_RESPONSES",
    "AttachmentIn",
    "CallTokenResponse",
    "CreateRoomRequest",
    "ErrorDetail",
    "ErrorResponse",
    "JoinRoomRequest",
    "JoinRoomResponse",
    "MemberProfile",
    "MemberResponse",
    "MessageHistoryResponse",
    "MessageResponse",
    "ProfileResponse",
    "PushTokenResponse",
    "RegisterPushTokenRequest",
    "RemovePushTokenRequest",
    "RoomListResponse",
    "RoomMembersResponse",
    "RoomResponse",
    "SendMessageRequest",
    "SetLiveRequest",
    "UpdateProfileRequest",
]
