"""Profile service for business logic."""

import re
from typing import Any, Dict, Optional
from uuid import UUID

from yolcu.core.authorization import Actor, AuthorizationGuard
from yolcu.core.logging import get_logger
from yolcu.exceptions import NotFoundError, ValidationError
from yolcu.models.profile import USERNAME_PATTERN, Profile
from yolcu.repositories.profile_repo import ProfileRepo

logger = get_logger(__name__)

# Business rules constants
MAX_DISPLAY_NAME_LENGTH = 100
MIN_USERNAME_LENGTH = 3
MAX_USERNAME_LENGTH = 50

_USERNAME_RE = re.compile(USERNAME_PATTERN)


class ProfileService:
    """Profile service for business logic."""

    def __init__(self, profile_repo: ProfileRepo):
        """Initialize the profile service."""
        self.profile_repo = profile_repo

    def get_my_profile(self, actor: Actor) -> Profile:
        """Get the actor's own profile, provisioning it if needed."""
        return self.profile_repo.ensure_profile(actor.user_id)

    def get_profile(self, profile_id: UUID, actor: Actor) -> Profile:
        """Get any profile by ID."""
        logger.debug(f"User {actor.user_id} reading profile {profile_id}")
        profile = self.profile_repo.get_profile_by_id(profile_id)
        if profile is None:
            raise NotFoundError("Profile not found", profile_id=profile_id)
        return profile

    def update_profile(
        self,
        profile_id: UUID,
        actor: Actor,
        display_name: Optional[str] = None,
        avatar_url: Optional[str] = None,
        username: Optional[str] = None,
    ) -> Profile:
        """Update the actor's own profile. Only supplied fields change."""
        AuthorizationGuard.require_profile_owner(profile_id, actor)

        changes: Dict[str, Any] = {}
        if display_name is not None:
            changes["display_name"] = self._validate_display_name(display_name)
        if avatar_url is not None:
            changes["avatar_url"] = avatar_url.strip() or None
        if username is not None:
            changes["username"] = self._validate_username(username)

        if not changes:
            return self.get_profile(profile_id, actor)

        profile = self.profile_repo.update_profile(profile_id, changes)
        if profile is None:
            raise NotFoundError("Profile not found", profile_id=profile_id)

        logger.info(f"Updated profile {profile_id}: {sorted(changes)}")
        return profile

    def _validate_display_name(self, display_name: str) -> str:
        stripped = display_name.strip()
        if not stripped:
            raise ValidationError("Display name cannot be empty")
        if len(stripped) > MAX_DISPLAY_NAME_LENGTH:
            raise ValidationError(
                f"Display name cannot exceed {MAX_DISPLAY_NAME_LENGTH} characters"
            )
        return stripped

    def _validate_username(self, username: str) -> str:
        stripped = username.strip()
        if not MIN_USERNAME_LENGTH <= len(stripped) <= MAX_USERNAME_LENGTH:
            raise ValidationError(
                f"Username must be {MIN_USERNAME_LENGTH}-{MAX_USERNAME_LENGTH} characters"
            )
        if not _USERNAME_RE.match(stripped):
            raise ValidationError(
                "Username may contain only lowercase letters, digits and underscores"
            )
        return stripped
