"""Best-effort publishing of room change notifications."""

from typing import Any, Callable, Dict, Optional
from uuid import UUID

from pika.exceptions import AMQPError

from yolcu.core.enums import RoomEventType
from yolcu.core.logging import get_logger
from yolcu.core.messaging.broker import MessageBroker, get_message_broker
from yolcu.core.observability.metrics import log_counter_increment

logger = get_logger(__name__)


class RoomEventPublisher:
    """Publish room events after the corresponding write has committed.

    The database row is already durable when this runs, so a broker outage
    is logged and counted rather than failing the request.
    """

    def __init__(
        self, broker_factory: Callable[[], MessageBroker] = get_message_broker
    ):
        self.broker_factory = broker_factory

    def publish(
        self, room_id: UUID, event_type: RoomEventType, payload: Dict[str, Any]
    ) -> Optional[str]:
        try:
            return self.broker_factory().publish_room_event(
                room_id, event_type, payload
            )
        except AMQPError as e:
            logger.warning(
                f"Could not publish {event_type.value} for room {room_id}: {e}"
            )
            log_counter_increment(
                "room_event_publish_failures_total",
                labels={"event_type": event_type.value},
            )
            return None
