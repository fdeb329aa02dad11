"""Push token registration."""

from typing import Optional

from yolcu.core.authorization import Actor
from yolcu.core.enums import DeviceType
from yolcu.core.logging import get_logger
from yolcu.exceptions import NotFoundError, ValidationError
from yolcu.models.push_token import PushToken
from yolcu.repositories.push_token_repo import PushTokenRepo

logger = get_logger(__name__)

MAX_PUSH_TOKEN_LENGTH = 512


class PushTokenService:
    def __init__(self, push_token_repo: PushTokenRepo):
        self.push_token_repo = push_token_repo

    def register_push_token(
        self, actor: Actor, token: str, device_type: Optional[DeviceType] = None
    ) -> PushToken:
        """Register or refresh one of the actor's device tokens."""
        token = self._validate_token(token)
        push_token = self.push_token_repo.upsert_token(
            actor.user_id, token, device_type
        )
        logger.info(f"Registered push token for user {actor.user_id} ({device_type})")
        return push_token

    def remove_push_token(self, actor: Actor, token: str) -> None:
        """Remove one of the actor's own device tokens."""
        token = self._validate_token(token)
        if not self.push_token_repo.delete_token(actor.user_id, token):
            raise NotFoundError("Push token not found")
        logger.info(f"Removed push token for user {actor.user_id}")

    def _validate_token(self, token: str) -> str:
        stripped = (token or "").strip()
        if not stripped:
            raise ValidationError("Push token cannot be empty")
        if len(stripped) > MAX_PUSH_TOKEN_LENGTH:
            raise ValidationError(
                f"Push token cannot exceed {MAX_PUSH_TOKEN_LENGTH} characters"
            )
        return stripped
