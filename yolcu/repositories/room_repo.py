"""Room repository."""

from typing import Callable, List, Optional, Tuple, cast
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from yolcu.core.logging import get_logger
from yolcu.exceptions import ConflictError, NotFoundError
from yolcu.models.membership import RoomMember
from yolcu.models.room import Room
from yolcu.repositories.base_repo import BaseRepo

logger = get_logger(__name__)


class RoomRepo(BaseRepo):
    """Room and membership persistence."""

    def _insert_room(
        self, session: Session, name: str, created_by: UUID, invite_code: str
    ) -> Room:
        """Insert a room inside a savepoint so a code collision leaves the session usable."""
        room = Room(name=name, created_by=created_by, invite_code=invite_code)
        with session.begin_nested():
            session.add(room)
            session.flush()
        return room

    def _create_room_implementation(
        self,
        session: Session,
        name: str,
        created_by: UUID,
        invite_code: Optional[str],
        code_factory: Optional[Callable[[], str]],
        max_attempts: int,
    ) -> Room:
        """Implementation of room creation."""
        if invite_code is not None:
            try:
                return self._insert_room(session, name, created_by, invite_code)
            except IntegrityError as e:
                if self._is_unique_violation(e, "invite_code"):
                    logger.info(f"Requested invite code already taken: {invite_code}")
                    raise ConflictError(
                        "Invite code is already in use", invite_code=invite_code
                    ) from e
                raise

        if code_factory is None:
            raise ValueError("Either invite_code or code_factory is required")

        for attempt in range(1, max_attempts + 1):
            candidate = code_factory()
            try:
                room = self._insert_room(session, name, created_by, candidate)
            except IntegrityError as e:
                if not self._is_unique_violation(e, "invite_code"):
                    raise
                logger.warning(
                    f"Invite code collision on attempt {attempt}/{max_attempts}"
                )
                continue
            logger.debug(f"Created room {room.id} with invite code {candidate}")
            return room

        raise ConflictError(
            f"Could not allocate a unique invite code after {max_attempts} attempts"
        )

    def create_room(
        self,
        name: str,
        created_by: UUID,
        invite_code: Optional[str] = None,
        code_factory: Optional[Callable[[], str]] = None,
        max_attempts: int = 5,
        session: Optional[Session] = None,
    ) -> Room:
        """Create a room with a fixed or generated invite code."""
        return cast(
            Room,
            self._execute_with_session(
                lambda s: self._create_room_implementation(
                    s, name, created_by, invite_code, code_factory, max_attempts
                ),
                session=session,
                operation_name="create_room",
            ),
        )

    def _get_room_by_id_implementation(
        self, session: Session, room_id: UUID
    ) -> Optional[Room]:
        return cast(Optional[Room], session.get(Room, room_id))

    def get_room_by_id(
        self, room_id: UUID, session: Optional[Session] = None
    ) -> Optional[Room]:
        """Get a room by ID."""
        return cast(
            Optional[Room],
            self._execute_with_session(
                lambda s: self._get_room_by_id_implementation(s, room_id),
                session=session,
                operation_name="get_room_by_id",
            ),
        )

    def _get_room_by_invite_code_implementation(
        self, session: Session, invite_code: str
    ) -> Optional[Room]:
        return cast(
            Optional[Room],
            session.query(Room).filter(Room.invite_code == invite_code).one_or_none(),
        )

    def get_room_by_invite_code(
        self, invite_code: str, session: Optional[Session] = None
    ) -> Optional[Room]:
        """Resolve an invite code to its room."""
        return cast(
            Optional[Room],
            self._execute_with_session(
                lambda s: self._get_room_by_invite_code_implementation(s, invite_code),
                session=session,
                operation_name="get_room_by_invite_code",
            ),
        )

    def _add_member_implementation(
        self, session: Session, room_id: UUID, user_id: UUID
    ) -> Tuple[RoomMember, bool]:
        """Implementation of idempotent member addition."""
        existing = session.get(RoomMember, (room_id, user_id))
        if existing is not None:
            return existing, False

        membership = RoomMember(room_id=room_id, user_id=user_id)
        try:
            with session.begin_nested():
                session.add(membership)
                session.flush()
        except IntegrityError:
            # Either a concurrent insert of the same pair won or the room is gone
            winner = (
                session.query(RoomMember)
                .filter(RoomMember.room_id == room_id, RoomMember.user_id == user_id)
                .one_or_none()
            )
            if winner is None:
                if session.get(Room, room_id) is None:
                    raise NotFoundError("Room not found", room_id=room_id)
                raise
            logger.info(
                f"Concurrent join resolved for user {user_id} in room {room_id}"
            )
            return winner, False
        return membership, True

    def add_member(
        self, room_id: UUID, user_id: UUID, session: Optional[Session] = None
    ) -> Tuple[RoomMember, bool]:
        """Add a member to a room.

        Returns the membership and whether a new row was inserted.
        """
        return cast(
            Tuple[RoomMember, bool],
            self._execute_with_session(
                lambda s: self._add_member_implementation(s, room_id, user_id),
                session=session,
                operation_name="add_member",
            ),
        )

    def _remove_member_implementation(
        self, session: Session, room_id: UUID, user_id: UUID
    ) -> bool:
        deleted = (
            session.query(RoomMember)
            .filter(RoomMember.room_id == room_id, RoomMember.user_id == user_id)
            .delete(synchronize_session=False)
        )
        return deleted > 0

    def remove_member(
        self, room_id: UUID, user_id: UUID, session: Optional[Session] = None
    ) -> bool:
        """Remove a member from a room. Returns False if there was no row."""
        return cast(
            bool,
            self._execute_with_session(
                lambda s: self._remove_member_implementation(s, room_id, user_id),
                session=session,
                operation_name="remove_member",
            ),
        )

    def _is_member_implementation(
        self, session: Session, room_id: UUID, user_id: UUID
    ) -> bool:
        return session.get(RoomMember, (room_id, user_id)) is not None

    def is_member(
        self, room_id: UUID, user_id: UUID, session: Optional[Session] = None
    ) -> bool:
        """Check if a user is a member of a room."""
        return cast(
            bool,
            self._execute_with_session(
                lambda s: self._is_member_implementation(s, room_id, user_id),
                session=session,
                operation_name="is_member",
            ),
        )

    def _delete_room_implementation(self, session: Session, room_id: UUID) -> bool:
        room = session.get(Room, room_id)
        if room is None:
            return False
        # ORM cascade removes memberships and messages; the FKs cascade as well
        session.delete(room)
        session.flush()
        return True

    def delete_room(self, room_id: UUID, session: Optional[Session] = None) -> bool:
        """Delete a room with its memberships and messages."""
        return cast(
            bool,
            self._execute_with_session(
                lambda s: self._delete_room_implementation(s, room_id),
                session=session,
                operation_name="delete_room",
            ),
        )

    def _get_user_rooms_implementation(
        self, session: Session, user_id: UUID
    ) -> List[Room]:
        return cast(
            List[Room],
            (
                session.query(Room)
                .join(RoomMember, RoomMember.room_id == Room.id)
                .filter(RoomMember.user_id == user_id)
                .order_by(RoomMember.joined_at.desc())
                .all()
            ),
        )

    def get_user_rooms(
        self, user_id: UUID, session: Optional[Session] = None
    ) -> List[Room]:
        """Get all rooms a user belongs to, most recently joined first."""
        return cast(
            List[Room],
            self._execute_with_session(
                lambda s: self._get_user_rooms_implementation(s, user_id),
                session=session,
                operation_name="get_user_rooms",
            ),
        )

    def _get_room_members_implementation(
        self, session: Session, room_id: UUID
    ) -> List[RoomMember]:
        return cast(
            List[RoomMember],
            (
                session.query(RoomMember)
                .options(joinedload(RoomMember.profile))
                .filter(RoomMember.room_id == room_id)
                .order_by(RoomMember.joined_at.asc())
                .all()
            ),
        )

    def get_room_members(
        self, room_id: UUID, session: Optional[Session] = None
    ) -> List[RoomMember]:
        """Get all memberships of a room with their profiles loaded."""
        return cast(
            List[RoomMember],
            self._execute_with_session(
                lambda s: self._get_room_members_implementation(s, room_id),
                session=session,
                operation_name="get_room_members",
            ),
        )

    def _get_member_ids_implementation(
        self, session: Session, room_id: UUID, exclude_user_id: Optional[UUID]
    ) -> List[UUID]:
        query = session.query(RoomMember.user_id).filter(RoomMember.room_id == room_id)
        if exclude_user_id is not None:
            query = query.filter(RoomMember.user_id != exclude_user_id)
        return [row.user_id for row in query.all()]

    def get_member_ids(
        self,
        room_id: UUID,
        exclude_user_id: Optional[UUID] = None,
        session: Optional[Session] = None,
    ) -> List[UUID]:
        """Get the user ids of a room's members."""
        return cast(
            List[UUID],
            self._execute_with_session(
                lambda s: self._get_member_ids_implementation(
                    s, room_id, exclude_user_id
                ),
                session=session,
                operation_name="get_member_ids",
            ),
        )

    def _set_live_implementation(
        self, session: Session, room_id: UUID, is_live: bool
    ) -> Optional[Room]:
        room = session.get(Room, room_id)
        if room is None:
            return None
        room.is_live = is_live
        session.flush()
        return cast(Room, room)

    def set_live(
        self, room_id: UUID, is_live: bool, session: Optional[Session] = None
    ) -> Optional[Room]:
        """Mark whether a call session is running in the room."""
        return cast(
            Optional[Room],
            self._execute_with_session(
                lambda s: self._set_live_implementation(s, room_id, is_live),
                session=session,
                operation_name="set_live",
            ),
        )
