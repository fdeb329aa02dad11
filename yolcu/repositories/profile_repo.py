"""Profile repository."""

from typing import Any, Dict, Optional, cast
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from yolcu.core.logging import get_logger
from yolcu.exceptions import ConflictError
from yolcu.models.profile import Profile
from yolcu.repositories.base_repo import BaseRepo

logger = get_logger(__name__)

UPDATABLE_PROFILE_FIELDS = ("display_name", "avatar_url", "username")


class ProfileRepo(BaseRepo):
    """Profile repository."""

    def _try_insert_profile(
        self, session: Session, user_id: UUID, username: str
    ) -> Optional[Profile]:
        profile = Profile(id=user_id, username=username)
        try:
            with session.begin_nested():
                session.add(profile)
                session.flush()
        except IntegrityError:
            return None
        return profile

    def _ensure_profile_implementation(
        self, session: Session, user_id: UUID
    ) -> Profile:
        """Implementation of first-sight profile provisioning."""
        existing = session.get(Profile, user_id)
        if existing is not None:
            return cast(Profile, existing)

        for username in (Profile.default_username(user_id), f"user_{user_id.hex}"):
            profile = self._try_insert_profile(session, user_id, username)
            if profile is not None:
                logger.info(f"Provisioned profile {user_id} as {username}")
                return profile

            # Either another request provisioned the same id, or the short
            # username belongs to someone else
            existing = session.get(Profile, user_id)
            if existing is not None:
                return cast(Profile, existing)

        raise ConflictError("Could not provision profile", user_id=user_id)

    def ensure_profile(
        self, user_id: UUID, session: Optional[Session] = None
    ) -> Profile:
        """Return the profile for an identity, creating it on first sight."""
        return cast(
            Profile,
            self._execute_with_session(
                lambda s: self._ensure_profile_implementation(s, user_id),
                session=session,
                operation_name="ensure_profile",
            ),
        )

    def _get_profile_by_id_implementation(
        self, session: Session, profile_id: UUID
    ) -> Optional[Profile]:
        return cast(Optional[Profile], session.get(Profile, profile_id))

    def get_profile_by_id(
        self, profile_id: UUID, session: Optional[Session] = None
    ) -> Optional[Profile]:
        """Get a profile by ID."""
        return cast(
            Optional[Profile],
            self._execute_with_session(
                lambda s: self._get_profile_by_id_implementation(s, profile_id),
                session=session,
                operation_name="get_profile_by_id",
            ),
        )

    def _update_profile_implementation(
        self, session: Session, profile_id: UUID, changes: Dict[str, Any]
    ) -> Optional[Profile]:
        """Implementation of profile update."""
        profile = session.get(Profile, profile_id)
        if profile is None:
            return None

        unknown = set(changes) - set(UPDATABLE_PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update profile fields: {sorted(unknown)}")

        for field, value in changes.items():
            setattr(profile, field, value)

        try:
            with session.begin_nested():
                session.flush()
        except IntegrityError as e:
            if self._is_unique_violation(e, "username"):
                raise ConflictError(
                    "Username is already taken", username=changes.get("username")
                ) from e
            raise
        return cast(Profile, profile)

    def update_profile(
        self,
        profile_id: UUID,
        changes: Dict[str, Any],
        session: Optional[Session] = None,
    ) -> Optional[Profile]:
        """Apply field changes to a profile. Returns None if it does not exist."""
        return cast(
            Optional[Profile],
            self._execute_with_session(
                lambda s: self._update_profile_implementation(s, profile_id, changes),
                session=session,
                operation_name="update_profile",
            ),
        )
