"""Room service: invite codes, joining and the membership lifecycle."""

from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from yolcu.core.authorization import Actor, AuthorizationGuard
from yolcu.core.config import settings
from yolcu.core.enums import RoomEventType, RoomRole
from yolcu.core.invite_codes import (
    generate_invite_code,
    normalize_invite_code,
    validate_custom_invite_code,
)
from yolcu.core.logging import get_logger
from yolcu.core.observability.metrics import log_counter_increment
from yolcu.exceptions import (
    ForbiddenError,
    NotFoundError,
    RoomMembershipIncompleteError,
    ValidationError,
)
from yolcu.models.membership import RoomMember
from yolcu.models.room import Room
from yolcu.repositories.room_repo import RoomRepo
from yolcu.services.events import RoomEventPublisher

logger = get_logger(__name__)

# Business rules constants
MAX_ROOM_NAME_LENGTH = 255


@dataclass(frozen=True)
class JoinResult:
    """Outcome of a join-by-code attempt."""

    room_id: UUID
    already_member: bool


class RoomService:
    """Room service for business logic."""

    def __init__(
        self,
        room_repo: RoomRepo,
        publisher: RoomEventPublisher,
        guard: Optional[AuthorizationGuard] = None,
    ):
        """Initialize the room service."""
        self.room_repo = room_repo
        self.publisher = publisher
        self.guard = guard or AuthorizationGuard(room_repo)

    def create_room(
        self, name: str, actor: Actor, invite_code: Optional[str] = None
    ) -> Room:
        """Create a room and make the actor its creator and first member.

        The room and the creator's membership are committed separately. If the
        membership insert fails the room is kept and
        ``RoomMembershipIncompleteError`` tells the caller to retry by joining
        with the room's invite code.
        """
        logger.info(f"Creating room '{name}' by user {actor.user_id}")

        name = self._validate_room_name(name)
        if invite_code is not None:
            invite_code = validate_custom_invite_code(invite_code)

        room = self.room_repo.create_room(
            name=name,
            created_by=actor.user_id,
            invite_code=invite_code,
            code_factory=lambda: generate_invite_code(settings.INVITE_CODE_LENGTH),
            max_attempts=settings.INVITE_CODE_MAX_ATTEMPTS,
        )

        try:
            self.room_repo.add_member(room.id, actor.user_id)
        except SQLAlchemyError as e:
            logger.error(f"Room {room.id} created but creator membership failed: {e}")
            log_counter_increment("room_membership_incomplete_total")
            raise RoomMembershipIncompleteError(room.id, room.invite_code) from e

        log_counter_increment("rooms_created_total")
        logger.info(f"Created room: {room.id}")
        return room

    def join_room_by_code(self, code: str, actor: Actor) -> JoinResult:
        """Join the room an invite code resolves to; repeat joins are no-ops."""
        normalized = normalize_invite_code(code)

        room = self.room_repo.get_room_by_invite_code(normalized)
        if room is None:
            logger.info(f"User {actor.user_id} presented an unknown invite code")
            log_counter_increment(
                "room_joins_total", labels={"outcome": "invalid_code"}
            )
            raise NotFoundError("invalid invite code")

        try:
            _, created = self.room_repo.add_member(room.id, actor.user_id)
        except NotFoundError:
            # Deleted after the code was resolved
            log_counter_increment(
                "room_joins_total", labels={"outcome": "invalid_code"}
            )
            raise NotFoundError("invalid invite code")
        outcome = "joined" if created else "already_member"
        log_counter_increment("room_joins_total", labels={"outcome": outcome})
        logger.info(f"User {actor.user_id} join of room {room.id}: {outcome}")
        return JoinResult(room_id=room.id, already_member=not created)

    def leave_room(self, room_id: UUID, actor: Actor) -> None:
        """Remove the actor's own membership. The creator must delete instead."""
        access = self.guard.resolve(room_id, actor)
        if access.role == RoomRole.CREATOR:
            raise ForbiddenError(
                "The room creator cannot leave; delete the room instead",
                room_id=room_id,
            )
        if not access.is_member:
            raise NotFoundError("You are not a member of this room", room_id=room_id)

        self.room_repo.remove_member(room_id, actor.user_id)
        logger.info(f"User {actor.user_id} left room {room_id}")
        self.publisher.publish(
            room_id,
            RoomEventType.MEMBER_REMOVED,
            {"user_id": str(actor.user_id), "reason": "left"},
        )

    def kick_member(self, room_id: UUID, actor: Actor, target_id: UUID) -> None:
        """Remove another member. Creator only; the creator cannot be kicked."""
        access = self.guard.require_room_creator(room_id, actor)
        if target_id == access.room.created_by:
            raise ForbiddenError("The room creator cannot be removed", room_id=room_id)

        if not self.room_repo.remove_member(room_id, target_id):
            raise NotFoundError(
                "User is not a member of this room", room_id=room_id, user_id=target_id
            )

        logger.info(f"User {target_id} removed from room {room_id} by {actor.user_id}")
        self.publisher.publish(
            room_id,
            RoomEventType.MEMBER_REMOVED,
            {
                "user_id": str(target_id),
                "reason": "kicked",
                "removed_by": str(actor.user_id),
            },
        )

    def delete_room(self, room_id: UUID, actor: Actor) -> None:
        """Delete a room with its memberships and messages. Creator only."""
        self.guard.require_room_creator(room_id, actor)
        self.room_repo.delete_room(room_id)
        logger.info(f"Room {room_id} deleted by {actor.user_id}")
        self.publisher.publish(
            room_id, RoomEventType.ROOM_DELETED, {"deleted_by": str(actor.user_id)}
        )

    def list_user_rooms(self, actor: Actor) -> List[Room]:
        """Rooms the actor belongs to, most recently joined first."""
        logger.debug(f"Getting rooms for user {actor.user_id}")
        return self.room_repo.get_user_rooms(actor.user_id)

    def get_room(self, room_id: UUID, actor: Actor) -> Room:
        """Get a room visible to the actor."""
        return self.guard.require_room_visible(room_id, actor).room

    def get_room_members(self, room_id: UUID, actor: Actor) -> List[RoomMember]:
        """Members with their profiles, in join order."""
        self.guard.require_room_member(room_id, actor)
        return self.room_repo.get_room_members(room_id)

    def set_room_live(self, room_id: UUID, actor: Actor, is_live: bool) -> Room:
        """Flag whether a call session is running. Creator only."""
        self.guard.require_room_creator(room_id, actor)
        room = self.room_repo.set_live(room_id, is_live)
        if room is None:
            raise NotFoundError("Room not found", room_id=room_id)

        logger.info(f"Room {room_id} live={is_live}")
        self.publisher.publish(
            room_id, RoomEventType.ROOM_LIVE_CHANGED, {"is_live": is_live}
        )
        return room

    def _validate_room_name(self, name: str) -> str:
        """Validate room name according to business rules."""
        stripped = (name or "").strip()
        if not stripped:
            raise ValidationError("Room name cannot be empty")
        if len(stripped) > MAX_ROOM_NAME_LENGTH:
            raise ValidationError(
                f"Room name cannot exceed {MAX_ROOM_NAME_LENGTH} characters"
            )
        return stripped
