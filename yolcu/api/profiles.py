"""Profile and push token endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from yolcu.api.schemas.common import ERROR_RESPONSES
from yolcu.api.schemas.profile import (
    ProfileResponse,
    PushTokenResponse,
    RegisterPushTokenRequest,
    RemovePushTokenRequest,
    UpdateProfileRequest,
)
from yolcu.core.auth_utils import CurrentActor
from yolcu.dependencies import get_profile_service, get_push_token_service
from yolcu.services.profile_service import ProfileService
from yolcu.services.push_token_service import PushTokenService

router = APIRouter(tags=["profiles"], responses=ERROR_RESPONSES)

ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
PushTokenServiceDep = Annotated[PushTokenService, Depends(get_push_token_service)]


@router.get("/profiles/me", response_model=ProfileResponse, summary="Get my profile")
async def get_my_profile(
    profile_service: ProfileServiceDep, actor: CurrentActor
) -> ProfileResponse:
    return ProfileResponse.model_validate(profile_service.get_my_profile(actor))


@router.patch(
    "/profiles/me", response_model=ProfileResponse, summary="Update my profile"
)
async def update_my_profile(
    request: UpdateProfileRequest,
    profile_service: ProfileServiceDep,
    actor: CurrentActor,
) -> ProfileResponse:
    profile = profile_service.update_profile(
        actor.user_id,
        actor,
        display_name=request.display_name,
        avatar_url=request.avatar_url,
        username=request.username,
    )
    return ProfileResponse.model_validate(profile)


@router.get(
    "/profiles/{profile_id}", response_model=ProfileResponse, summary="Get a profile"
)
async def get_profile(
    profile_id: UUID, profile_service: ProfileServiceDep, actor: CurrentActor
) -> ProfileResponse:
    return ProfileResponse.model_validate(
        profile_service.get_profile(profile_id, actor)
    )


@router.put(
    "/push-tokens",
    response_model=PushTokenResponse,
    summary="Register a device push token",
)
async def register_push_token(
    request: RegisterPushTokenRequest,
    push_token_service: PushTokenServiceDep,
    actor: CurrentActor,
) -> PushTokenResponse:
    push_token = push_token_service.register_push_token(
        actor, request.token, request.device_type
    )
    return PushTokenResponse.model_validate(push_token)


@router.delete(
    "/push-tokens",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a device push token",
)
async def remove_push_token(
    request: RemovePushTokenRequest,
    push_token_service: PushTokenServiceDep,
    actor: CurrentActor,
) -> None:
    push_token_service.remove_push_token(actor, request.token)
