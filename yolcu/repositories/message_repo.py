"""Message repository."""

from typing import List, Optional, cast
from uuid import UUID

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from yolcu.core.logging import get_logger
from yolcu.models.message import Message
from yolcu.repositories.base_repo import BaseRepo

logger = get_logger(__name__)


class MessageRepo(BaseRepo):
    """Message repository."""

    def _create_message_implementation(
        self,
        session: Session,
        room_id: UUID,
        user_id: UUID,
        content: str,
        file_path: Optional[str],
        file_name: Optional[str],
        file_type: Optional[str],
        file_size: Optional[int],
    ) -> Message:
        """Implementation of message creation."""
        message = Message(
            room_id=room_id,
            user_id=user_id,
            content=content,
            file_path=file_path,
            file_name=file_name,
            file_type=file_type,
            file_size=file_size,
        )
        session.add(message)
        session.flush()

        logger.debug(
            f"Created message: {message.id} in room {room_id} from user {user_id}"
        )
        return message

    def create_message(
        self,
        room_id: UUID,
        user_id: UUID,
        content: str,
        file_path: Optional[str] = None,
        file_name: Optional[str] = None,
        file_type: Optional[str] = None,
        file_size: Optional[int] = None,
        session: Optional[Session] = None,
    ) -> Message:
        """Create a new message."""
        return cast(
            Message,
            self._execute_with_session(
                lambda s: self._create_message_implementation(
                    s,
                    room_id,
                    user_id,
                    content,
                    file_path,
                    file_name,
                    file_type,
                    file_size,
                ),
                session=session,
                operation_name="create_message",
            ),
        )

    def _get_message_by_id_implementation(
        self, session: Session, message_id: UUID
    ) -> Optional[Message]:
        """Implementation of message retrieval by ID."""
        return cast(Optional[Message], session.get(Message, message_id))

    def get_message_by_id(
        self, message_id: UUID, session: Optional[Session] = None
    ) -> Optional[Message]:
        """Get a message by ID."""
        return cast(
            Optional[Message],
            self._execute_with_session(
                lambda s: self._get_message_by_id_implementation(s, message_id),
                session=session,
                operation_name="get_message_by_id",
            ),
        )

    def _get_room_messages_implementation(
        self,
        session: Session,
        room_id: UUID,
        limit: int,
        before: Optional[Message],
        after: Optional[Message],
    ) -> List[Message]:
        """Implementation of keyset-paginated room history."""
        query = session.query(Message).filter(Message.room_id == room_id)

        if after is not None:
            query = query.filter(
                or_(
                    Message.created_at > after.created_at,
                    and_(Message.created_at == after.created_at, Message.id > after.id),
                )
            )
            return cast(
                List[Message],
                query.order_by(Message.created_at.asc(), Message.id.asc())
                .limit(limit)
                .all(),
            )

        if before is not None:
            query = query.filter(
                or_(
                    Message.created_at < before.created_at,
                    and_(
                        Message.created_at == before.created_at, Message.id < before.id
                    ),
                )
            )

        # Newest page first, then flip back to chronological order
        newest_first = (
            query.order_by(Message.created_at.desc(), Message.id.desc())
            .limit(limit)
            .all()
        )
        return cast(List[Message], list(reversed(newest_first)))

    def get_room_messages(
        self,
        room_id: UUID,
        limit: int = 50,
        before: Optional[Message] = None,
        after: Optional[Message] = None,
        session: Optional[Session] = None,
    ) -> List[Message]:
        """Get a page of room messages in ascending (created_at, id) order.

        ``before`` returns the page immediately preceding that message and
        ``after`` the page following it. Without a cursor the latest page is
        returned.
        """
        return cast(
            List[Message],
            self._execute_with_session(
                lambda s: self._get_room_messages_implementation(
                    s, room_id, limit, before, after
                ),
                session=session,
                operation_name="get_room_messages",
            ),
        )
