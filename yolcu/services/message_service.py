"""Message service for business logic."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from uuid import UUID

from yolcu.core.authorization import Actor, AuthorizationGuard
from yolcu.core.enums import RoomEventType
from yolcu.core.logging import get_logger
from yolcu.exceptions import ValidationError
from yolcu.models.message import Message
from yolcu.repositories.message_repo import MessageRepo
from yolcu.repositories.room_repo import RoomRepo
from yolcu.services.events import RoomEventPublisher

logger = get_logger(__name__)

# Business rules constants
MAX_MESSAGE_LENGTH = 4000
MIN_HISTORY_LIMIT = 1
MAX_HISTORY_LIMIT = 100


@dataclass(frozen=True)
class Attachment:
    """Reference to a file already uploaded to object storage."""

    file_path: str
    file_name: str
    file_type: Optional[str] = None
    file_size: Optional[int] = None


def message_event_payload(message: Message) -> Dict[str, Any]:
    """Body of the ``message.created`` event."""
    return {
        "id": str(message.id),
        "room_id": str(message.room_id),
        "user_id": str(message.user_id),
        "content": message.content,
        "created_at": message.created_at.isoformat(),
        "file_path": message.file_path,
        "file_name": message.file_name,
        "file_type": message.file_type,
        "file_size": message.file_size,
    }


class MessageService:
    """Message service for business logic."""

    def __init__(
        self,
        message_repo: MessageRepo,
        room_repo: RoomRepo,
        publisher: RoomEventPublisher,
        guard: Optional[AuthorizationGuard] = None,
    ):
        """Initialize the message service."""
        self.message_repo = message_repo
        self.room_repo = room_repo
        self.publisher = publisher
        self.guard = guard or AuthorizationGuard(room_repo)

    def send_message(
        self,
        room_id: UUID,
        actor: Actor,
        content: str,
        attachment: Optional[Attachment] = None,
    ) -> Message:
        """Store a message, then announce it on the room event bus."""
        logger.info(f"Sending message to room {room_id} from user {actor.user_id}")

        self.guard.require_room_member(room_id, actor)
        content = self._validate_message_content(content, attachment)

        message = self.message_repo.create_message(
            room_id=room_id,
            user_id=actor.user_id,
            content=content,
            file_path=attachment.file_path if attachment else None,
            file_name=attachment.file_name if attachment else None,
            file_type=attachment.file_type if attachment else None,
            file_size=attachment.file_size if attachment else None,
        )
        logger.info(f"Created message: {message.id} in room {room_id}")

        self.publisher.publish(
            room_id, RoomEventType.MESSAGE_CREATED, message_event_payload(message)
        )
        return message

    def get_room_messages(
        self,
        room_id: UUID,
        actor: Actor,
        limit: int = 50,
        before: Optional[UUID] = None,
        after: Optional[UUID] = None,
    ) -> List[Message]:
        """Get a page of room history in ascending order."""
        self.guard.require_room_member(room_id, actor)

        # Business rule: Validate limit
        if limit < MIN_HISTORY_LIMIT or limit > MAX_HISTORY_LIMIT:
            raise ValidationError(
                f"Limit must be between {MIN_HISTORY_LIMIT} and {MAX_HISTORY_LIMIT}"
            )
        if before is not None and after is not None:
            raise ValidationError("Use either 'before' or 'after', not both")

        before_message = self._resolve_cursor(room_id, before, "before")
        after_message = self._resolve_cursor(room_id, after, "after")

        messages = self.message_repo.get_room_messages(
            room_id=room_id,
            limit=limit,
            before=before_message,
            after=after_message,
        )
        logger.debug(f"Retrieved {len(messages)} messages for room {room_id}")
        return messages

    def _resolve_cursor(
        self, room_id: UUID, message_id: Optional[UUID], name: str
    ) -> Optional[Message]:
        if message_id is None:
            return None
        message = self.message_repo.get_message_by_id(message_id)
        if message is None or message.room_id != room_id:
            raise ValidationError(
                f"'{name}' does not reference a message in this room",
                message_id=message_id,
            )
        return message

    def _validate_message_content(
        self, content: Optional[str], attachment: Optional[Attachment]
    ) -> str:
        """Validate message content according to business rules."""
        stripped = (content or "").strip()

        if len(stripped) > MAX_MESSAGE_LENGTH:
            raise ValidationError(
                f"Message content cannot exceed {MAX_MESSAGE_LENGTH} characters"
            )

        if attachment is not None:
            if not attachment.file_path or not attachment.file_name:
                raise ValidationError("Attachment requires a file path and a file name")
            if attachment.file_size is not None and attachment.file_size < 0:
                raise ValidationError("Attachment size cannot be negative")
        elif not stripped:
            raise ValidationError("Message content cannot be empty or only whitespace")

        return stripped
