"""Room-scoped authorization checks shared by every service operation."""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from yolcu.core.enums import RoomRole
from yolcu.core.logging import get_logger
from yolcu.exceptions import ForbiddenError, NotFoundError
from yolcu.models.room import Room
from yolcu.repositories.room_repo import RoomRepo

logger = get_logger(__name__)


@dataclass(frozen=True)
class Actor:
    """The authenticated identity a request acts as."""

    user_id: UUID


@dataclass(frozen=True)
class RoomAccess:
    """An actor's resolved relationship to an existing room."""

    room: Room
    role: RoomRole
    is_member: bool


class AuthorizationGuard:
    """Resolve an actor's role in a room and enforce the required one.

    The room's existence is checked before access, so a deleted room always
    reads as not found while a kicked user reads as forbidden.
    """

    def __init__(self, room_repo: RoomRepo):
        self.room_repo = room_repo

    def resolve(
        self, room_id: UUID, actor: Actor, session: Optional[Session] = None
    ) -> RoomAccess:
        """Look up the room and classify the actor against it."""
        room = self.room_repo.get_room_by_id(room_id, session=session)
        if room is None:
            raise NotFoundError("Room not found", room_id=room_id)

        is_member = self.room_repo.is_member(room_id, actor.user_id, session=session)
        if room.created_by == actor.user_id:
            role = RoomRole.CREATOR
        elif is_member:
            role = RoomRole.MEMBER
        else:
            role = RoomRole.NON_MEMBER
        return RoomAccess(room=room, role=role, is_member=is_member)

    def require_room_visible(
        self, room_id: UUID, actor: Actor, session: Optional[Session] = None
    ) -> RoomAccess:
        """Creator or member."""
        access = self.resolve(room_id, actor, session=session)
        if access.role == RoomRole.NON_MEMBER:
            logger.info(f"User {actor.user_id} denied visibility of room {room_id}")
            raise ForbiddenError("You do not have access to this room", room_id=room_id)
        return access

    def require_room_member(
        self, room_id: UUID, actor: Actor, session: Optional[Session] = None
    ) -> RoomAccess:
        """A current membership row."""
        access = self.resolve(room_id, actor, session=session)
        if not access.is_member:
            logger.info(f"User {actor.user_id} is not a member of room {room_id}")
            raise ForbiddenError("You are not a member of this room", room_id=room_id)
        return access

    def require_room_creator(
        self, room_id: UUID, actor: Actor, session: Optional[Session] = None
    ) -> RoomAccess:
        """The room's creator."""
        access = self.resolve(room_id, actor, session=session)
        if access.role != RoomRole.CREATOR:
            logger.info(
                f"User {actor.user_id} attempted a creator-only action on room {room_id}"
            )
            raise ForbiddenError(
                "Only the room creator can perform this action", room_id=room_id
            )
        return access

    @staticmethod
    def require_profile_owner(profile_id: UUID, actor: Actor) -> None:
        if profile_id != actor.user_id:
            raise ForbiddenError(
                "You can only modify your own profile", profile_id=profile_id
            )
