"""Per-connection room subscriptions for the websocket gateway."""

from collections import defaultdict
from typing import Dict, Hashable, Optional, Set
from uuid import UUID

from yolcu.core.logging import get_logger

logger = get_logger(__name__)


class SubscriptionRegistry:
    """Which connections listen to which rooms.

    Every mutation keeps the room index and the connection index in step, so
    dropping a connection, a room, or a user's access to a room leaves no
    stale entries behind. All calls happen on the gateway's event loop.
    """

    def __init__(self) -> None:
        self._room_subscribers: Dict[UUID, Set[Hashable]] = defaultdict(set)
        self._connection_rooms: Dict[Hashable, Set[UUID]] = defaultdict(set)
        self._connection_users: Dict[Hashable, UUID] = {}

    def register(self, connection: Hashable, user_id: UUID) -> None:
        """Record the authenticated user behind a connection."""
        self._connection_users[connection] = user_id

    def user_of(self, connection: Hashable) -> Optional[UUID]:
        return self._connection_users.get(connection)

    def subscribe(self, connection: Hashable, room_id: UUID) -> bool:
        """Returns False if the connection was already subscribed."""
        if room_id in self._connection_rooms.get(connection, ()):
            return False
        self._room_subscribers[room_id].add(connection)
        self._connection_rooms[connection].add(room_id)
        return True

    def unsubscribe(self, connection: Hashable, room_id: UUID) -> bool:
        """Returns False if the connection was not subscribed."""
        rooms = self._connection_rooms.get(connection)
        if not rooms or room_id not in rooms:
            return False
        rooms.discard(room_id)
        if not rooms:
            del self._connection_rooms[connection]
        self._discard_subscriber(room_id, connection)
        return True

    def subscribers(self, room_id: UUID) -> Set[Hashable]:
        return set(self._room_subscribers.get(room_id, ()))

    def rooms_for(self, connection: Hashable) -> Set[UUID]:
        return set(self._connection_rooms.get(connection, ()))

    def drop_connection(self, connection: Hashable) -> Set[UUID]:
        """Forget a closed connection. Returns the rooms it was subscribed to."""
        rooms = self._connection_rooms.pop(connection, set())
        for room_id in rooms:
            self._discard_subscriber(room_id, connection)
        self._connection_users.pop(connection, None)
        return rooms

    def drop_room(self, room_id: UUID) -> Set[Hashable]:
        """Remove every subscription to a deleted room."""
        connections = self._room_subscribers.pop(room_id, set())
        for connection in connections:
            rooms = self._connection_rooms.get(connection)
            if rooms is not None:
                rooms.discard(room_id)
                if not rooms:
                    del self._connection_rooms[connection]
        if connections:
            logger.info(f"Dropped {len(connections)} subscriptions to room {room_id}")
        return connections

    def drop_user_from_room(self, room_id: UUID, user_id: UUID) -> Set[Hashable]:
        """Unsubscribe every connection of a user who lost access to a room."""
        dropped = {
            connection
            for connection in self.subscribers(room_id)
            if self._connection_users.get(connection) == user_id
        }
        for connection in dropped:
            self.unsubscribe(connection, room_id)
        return dropped

    def _discard_subscriber(self, room_id: UUID, connection: Hashable) -> None:
        subscribers = self._room_subscribers.get(room_id)
        if subscribers is None:
            return
        subscribers.discard(connection)
        if not subscribers:
            del self._room_subscribers[room_id]
