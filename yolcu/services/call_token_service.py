"""Access tokens for the room's video call session."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from jose import jwt

from yolcu.core.authorization import Actor, AuthorizationGuard
from yolcu.core.config import settings
from yolcu.core.enums import RoomRole
from yolcu.core.logging import get_logger
from yolcu.exceptions import ConfigurationError
from yolcu.repositories.profile_repo import ProfileRepo
from yolcu.repositories.room_repo import RoomRepo

logger = get_logger(__name__)


@dataclass(frozen=True)
class CallToken:
    token: str
    url: str


class CallTokenService:
    """Issue LiveKit-compatible access tokens to room members.

    The token is an HS256 JWT signed with the LiveKit API secret. ``iss`` is
    the API key, ``sub`` the participant identity, and the ``video`` claim
    carries the room grant. Only the room creator receives ``roomAdmin``.
    """

    def __init__(
        self,
        room_repo: RoomRepo,
        profile_repo: ProfileRepo,
        guard: Optional[AuthorizationGuard] = None,
    ):
        self.room_repo = room_repo
        self.profile_repo = profile_repo
        self.guard = guard or AuthorizationGuard(room_repo)

    def issue(self, room_id: UUID, actor: Actor) -> CallToken:
        access = self.guard.require_room_member(room_id, actor)

        if not settings.livekit_configured:
            logger.error("Missing LiveKit configuration")
            raise ConfigurationError("Server configuration error")

        profile = self.profile_repo.get_profile_by_id(actor.user_id)
        participant_name = profile.display_name if profile else str(actor.user_id)

        now = datetime.now(timezone.utc)
        claims = {
            "iss": settings.LIVEKIT_API_KEY,
            "sub": str(actor.user_id),
            "name": participant_name,
            "nbf": int(now.timestamp()),
            "exp": int(
                (now + timedelta(seconds=settings.CALL_TOKEN_TTL_SECONDS)).timestamp()
            ),
            "video": {
                "roomJoin": True,
                "room": str(room_id),
                "canPublish": True,
                "canSubscribe": True,
                "canPublishData": True,
                "roomAdmin": access.role == RoomRole.CREATOR,
            },
        }
        token = jwt.encode(claims, settings.LIVEKIT_API_SECRET, algorithm="HS256")
        logger.info(f"Issued call token for user {actor.user_id} in room {room_id}")
        return CallToken(token=str(token), url=str(settings.LIVEKIT_URL))
