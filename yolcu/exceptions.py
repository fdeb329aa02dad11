"""Typed failures raised by services and rendered by the API layer."""

from typing import Any, Dict, Optional
from uuid import UUID


class ChatError(Exception):
    """Base class for every failure that reaches the API boundary."""

    code = "CHAT_ERROR"
    status_code = 400

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the ``{"error": {...}}`` response body."""
        body: Dict[str, Any] = {"code": self.code, "message": self.message}
        for key, value in self.details.items():
            body[key] = str(value) if isinstance(value, UUID) else value
        return body


class NotFoundError(ChatError):
    """Room, invite code, membership or profile is absent."""

    code = "NOT_FOUND"
    status_code = 404


class ForbiddenError(ChatError):
    """The actor lacks the role the operation requires."""

    code = "FORBIDDEN"
    status_code = 403


class ConflictError(ChatError):
    """A uniqueness violation that is not absorbed into idempotent success."""

    code = "CONFLICT"
    status_code = 409


class ValidationError(ChatError):
    """Malformed input such as an empty name or code."""

    code = "VALIDATION_ERROR"
    status_code = 422


class RoomMembershipIncompleteError(ChatError):
    """The room was created but the creator's membership insert failed."""

    code = "ROOM_MEMBERSHIP_INCOMPLETE"
    status_code = 500

    def __init__(self, room_id: UUID, invite_code: Optional[str] = None):
        super().__init__(
            "Room was created but the creator could not be added as a member; "
            "retry by joining with the invite code",
            room_id=room_id,
            invite_code=invite_code,
        )
        self.room_id = room_id


class ConfigurationError(ChatError):
    """A required server-side setting is missing."""

    code = "CONFIGURATION_ERROR"
    status_code = 500


class PushDeliveryError(ChatError):
    """The push provider could not be reached or rejected a batch."""

    code = "PUSH_DELIVERY_FAILED"
    status_code = 502
