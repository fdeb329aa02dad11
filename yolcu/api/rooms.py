"""Room API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from yolcu.api.schemas.common import ERROR_RESPONSES
from yolcu.api.schemas.room import (
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
from yolcu.core.auth_utils import CurrentActor
from yolcu.core.config import settings
from yolcu.core.logging import get_logger
from yolcu.core.rate_limiter import RateLimiter
from yolcu.dependencies import (
    get_call_token_service,
    get_rate_limiter,
    get_room_service,
)
from yolcu.services.call_token_service import CallTokenService
from yolcu.services.room_service import RoomService

logger = get_logger(__name__)

router = APIRouter(prefix="/rooms", tags=["rooms"], responses=ERROR_RESPONSES)

RoomServiceDep = Annotated[RoomService, Depends(get_room_service)]


@router.post(
    "",
    response_model=RoomResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a room",
    description="Create a room with a generated or custom invite code. The caller becomes its creator and first member.",
)
async def create_room(
    request: CreateRoomRequest,
    room_service: RoomServiceDep,
    actor: CurrentActor,
) -> RoomResponse:
    room = room_service.create_room(
        request.name, actor, invite_code=request.invite_code
    )
    return RoomResponse.model_validate(room)


@router.get(
    "",
    response_model=RoomListResponse,
    summary="List my rooms",
)
async def list_rooms(
    room_service: RoomServiceDep, actor: CurrentActor
) -> RoomListResponse:
    rooms = room_service.list_user_rooms(actor)
    return RoomListResponse(
        rooms=[RoomResponse.model_validate(room) for room in rooms], total=len(rooms)
    )


@router.post(
    "/join",
    response_model=JoinRoomResponse,
    summary="Join a room by invite code",
    description="Idempotent: joining a room you already belong to succeeds without changes.",
)
async def join_room(
    request: JoinRoomRequest,
    room_service: RoomServiceDep,
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
    actor: CurrentActor,
) -> JoinRoomResponse:
    # Throttle invite code guessing
    if not await limiter.check_user_rate_limit(
        str(actor.user_id),
        "join_room",
        settings.JOIN_RATE_LIMIT_PER_MINUTE,
        settings.RATE_LIMIT_WINDOW_SECONDS,
    ):
        logger.warning(f"Join rate limit exceeded for user {actor.user_id}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many join attempts. Please try again later.",
        )

    result = room_service.join_room_by_code(request.code, actor)
    return JoinRoomResponse(
        status="already_member" if result.already_member else "joined",
        room_id=result.room_id,
        already_member=result.already_member,
    )


@router.get("/{room_id}", response_model=RoomResponse, summary="Get a room")
async def get_room(
    room_id: UUID, room_service: RoomServiceDep, actor: CurrentActor
) -> RoomResponse:
    return RoomResponse.model_validate(room_service.get_room(room_id, actor))


@router.delete(
    "/{room_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a room",
    description="Creator only. Removes all memberships and messages.",
)
async def delete_room(
    room_id: UUID, room_service: RoomServiceDep, actor: CurrentActor
) -> None:
    room_service.delete_room(room_id, actor)


@router.get(
    "/{room_id}/members",
    response_model=RoomMembersResponse,
    summary="List room members",
)
async def list_members(
    room_id: UUID, room_service: RoomServiceDep, actor: CurrentActor
) -> RoomMembersResponse:
    room = room_service.get_room(room_id, actor)
    memberships = room_service.get_room_members(room_id, actor)
    members = [
        MemberResponse(
            user_id=m.user_id,
            joined_at=m.joined_at,
            is_creator=m.user_id == room.created_by,
            profile=MemberProfile.model_validate(m.profile),
        )
        for m in memberships
    ]
    return RoomMembersResponse(room_id=room_id, members=members, total=len(members))


# Declared before /{user_id} so "me" is not parsed as a user id
@router.delete(
    "/{room_id}/members/me",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Leave a room",
)
async def leave_room(
    room_id: UUID, room_service: RoomServiceDep, actor: CurrentActor
) -> None:
    room_service.leave_room(room_id, actor)


@router.delete(
    "/{room_id}/members/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a member",
    description="Creator only. The creator cannot be removed.",
)
async def kick_member(
    room_id: UUID, user_id: UUID, room_service: RoomServiceDep, actor: CurrentActor
) -> None:
    room_service.kick_member(room_id, actor, user_id)


@router.put(
    "/{room_id}/live",
    response_model=RoomResponse,
    summary="Mark the room's call session as running or stopped",
)
async def set_live(
    room_id: UUID,
    request: SetLiveRequest,
    room_service: RoomServiceDep,
    actor: CurrentActor,
) -> RoomResponse:
    room = room_service.set_room_live(room_id, actor, request.is_live)
    return RoomResponse.model_validate(room)


@router.post(
    "/{room_id}/call-token",
    response_model=CallTokenResponse,
    summary="Get a call session token",
)
async def issue_call_token(
    room_id: UUID,
    call_token_service: Annotated[CallTokenService, Depends(get_call_token_service)],
    actor: CurrentActor,
) -> CallTokenResponse:
    call_token = call_token_service.issue(room_id, actor)
    return CallTokenResponse(token=call_token.token, url=call_token.url)
