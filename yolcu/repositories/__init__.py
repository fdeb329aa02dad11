"""Repository layer for data access."""

from .message_repo import MessageRepo
from .profile_repo import ProfileRepo
from .push_token_repo import PushTokenRepo
from .room_repo import RoomRepo
from .transaction import transaction_scope

__all__ = [
    "RoomRepo",
    "MessageRepo",
    "ProfileRepo",
    "PushTokenRepo",
    "transaction_scope",
]
