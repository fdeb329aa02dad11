"""RabbitMQ message broker implementation."""

# mypy: ignore-errors

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Union
from uuid import UUID

if TYPE_CHECKING:
    from pika.adapters.blocking_connection import BlockingChannel
    from pika.channel import Channel

import pika
from pika.exceptions import AMQPChannelError, AMQPConnectionError
from pika.exchange_type import ExchangeType

from yolcu.core.config import settings
from yolcu.core.enums import RoomEventType
from yolcu.core.observability.metrics import (
    log_connection_event,
    log_counter_increment,
)

logger = logging.getLogger(__name__)

ROOM_EVENTS_EXCHANGE = "room.events"
DEAD_LETTER_EXCHANGE = "room.events.dlx"
PUSH_DISPATCH_QUEUE = "push_dispatch"
PUSH_DISPATCH_DLQ = "push_dispatch_dlq"
GATEWAY_QUEUE = "realtime_gateway"


def room_routing_key(room_id: Union[UUID, str], event_type: RoomEventType) -> str:
    """Routing key for a room event, e.g. ``room.<id>.message.created``."""
    return f"room.{room_id}.{event_type.value}"


class MessageBroker:
    """RabbitMQ message broker for room event publishing and consumption."""

    def __init__(self) -> None:
        self.connection: Optional[pika.BlockingConnection] = None
        self.channel: Optional[Union["Channel", "BlockingChannel"]] = None
        # BlockingConnection is not thread-safe; API worker threads share it
        self._publish_lock = threading.Lock()
        self._connect()

    def _connect(self) -> None:
        """Establish connection to RabbitMQ."""
        try:
            self.connection = pika.BlockingConnection(
                pika.ConnectionParameters(
                    host=settings.RABBITMQ_HOST,
                    port=settings.RABBITMQ_PORT,
                    virtual_host=settings.RABBITMQ_VHOST,
                    credentials=pika.PlainCredentials(
                        settings.RABBITMQ_USER, settings.RABBITMQ_PASSWORD
                    ),
                    heartbeat=600,
                    blocked_connection_timeout=300,
                )
            )
            self.channel = self.connection.channel()
            self._setup_infrastructure()
            logger.info("Connected to RabbitMQ successfully")
            log_connection_event("connected", "rabbitmq", host=settings.RABBITMQ_HOST)
        except AMQPConnectionError as e:
            logger.error(f"Failed to connect to RabbitMQ: {e}")
            log_connection_event("connection_failed", "rabbitmq", error=str(e))
            raise

    def _setup_infrastructure(self) -> None:
        """Declare the room event exchange and its dead letter exchange."""
        try:
            if self.channel:
                self.channel.exchange_declare(
                    exchange=ROOM_EVENTS_EXCHANGE,
                    exchange_type=ExchangeType.topic,
                    durable=True,
                )
                self.channel.exchange_declare(
                    exchange=DEAD_LETTER_EXCHANGE,
                    exchange_type=ExchangeType.topic,
                    durable=True,
                )
            logger.info("RabbitMQ infrastructure setup completed")
        except AMQPChannelError as e:
            logger.error(f"Failed to setup RabbitMQ infrastructure: {e}")
            raise

    def setup_push_queue(self) -> str:
        """Set up the push dispatch work queue with dead lettering."""
        try:
            if self.channel:
                self.channel.queue_declare(queue=PUSH_DISPATCH_DLQ, durable=True)
                self.channel.queue_bind(
                    exchange=DEAD_LETTER_EXCHANGE,
                    queue=PUSH_DISPATCH_DLQ,
                    routing_key=f"{PUSH_DISPATCH_QUEUE}.failed",
                )

                self.channel.queue_declare(
                    queue=PUSH_DISPATCH_QUEUE,
                    durable=True,
                    arguments={
                        "x-dead-letter-exchange": DEAD_LETTER_EXCHANGE,
                        "x-dead-letter-routing-key": f"{PUSH_DISPATCH_QUEUE}.failed",
                        "x-message-ttl": 3600000,  # 1 hour
                    },
                )
                self.channel.queue_bind(
                    exchange=ROOM_EVENTS_EXCHANGE,
                    queue=PUSH_DISPATCH_QUEUE,
                    routing_key=f"room.*.{RoomEventType.MESSAGE_CREATED.value}",
                )

            logger.info(
                f"Set up push queue: {PUSH_DISPATCH_QUEUE} with DLQ: {PUSH_DISPATCH_DLQ}"
            )
            return PUSH_DISPATCH_QUEUE
        except AMQPChannelError as e:
            logger.error(f"Failed to setup push queue {PUSH_DISPATCH_QUEUE}: {e}")
            raise

    def setup_gateway_queue(self, instance_id: Optional[str] = None) -> str:
        """Set up the queue feeding a websocket gateway with every room event.

        Each gateway instance needs its own copy of every event, so a named
        instance gets a private auto-delete queue.
        """
        queue_name = f"{GATEWAY_QUEUE}.{instance_id}" if instance_id else GATEWAY_QUEUE

        try:
            if self.channel:
                self.channel.queue_declare(
                    queue=queue_name,
                    durable=instance_id is None,
                    auto_delete=instance_id is not None,
                )
                self.channel.queue_bind(
                    exchange=ROOM_EVENTS_EXCHANGE,
                    queue=queue_name,
                    routing_key="room.#",
                )

            logger.info(f"Set up gateway queue: {queue_name}")
            return queue_name
        except AMQPChannelError as e:
            logger.error(f"Failed to setup gateway queue {queue_name}: {e}")
            raise

    def publish_room_event(
        self,
        room_id: Union[UUID, str],
        event_type: RoomEventType,
        payload: Dict[str, Any],
    ) -> str:
        """Publish a room event and return its message ID."""
        routing_key = room_routing_key(room_id, event_type)
        message_id = str(uuid.uuid4())
        body = {
            "message_id": message_id,
            "event_type": event_type.value,
            "room_id": str(room_id),
            "occurred_at": datetime.now(timezone.utc).isoformat(),
            "data": payload,
        }

        try:
            with self._publish_lock:
                if not self.is_connected():
                    self.reconnect()
                self.channel.basic_publish(
                    exchange=ROOM_EVENTS_EXCHANGE,
                    routing_key=routing_key,
                    body=json.dumps(body, default=str),
                    properties=pika.BasicProperties(
                        message_id=message_id,  # For consumer-side deduplication
                        delivery_mode=2,  # Make message persistent
                        content_type="application/json",
                    ),
                )

            log_counter_increment(
                "room_events_published_total",
                labels={"event_type": event_type.value},
            )
            logger.info(
                f"Published {event_type.value} for room {room_id} with message ID {message_id}"
            )
            return message_id
        except (AMQPChannelError, AMQPConnectionError) as e:
            logger.error(
                f"Failed to publish {event_type.value} for room {room_id}: {e}"
            )
            log_counter_increment(
                "publish_errors_total",
                labels={"event_type": event_type.value, "error_type": type(e).__name__},
            )
            raise

    def is_connected(self) -> bool:
        """Check if broker is connected."""
        return (
            self.connection is not None
            and not self.connection.is_closed
            and self.channel is not None
            and not self.channel.is_closed
        )

    def reconnect(self):
        """Reconnect to RabbitMQ."""
        logger.info("Reconnecting to RabbitMQ...")
        self.close()
        self._connect()

    def start_consuming(
        self,
        queue_name: str,
        callback: Callable,
        consumer_tag: Optional[str] = None,
        prefetch_count: int = 10,
    ) -> None:
        """Register a manual-ack consumer and block until consumption stops."""
        try:
            if self.channel:
                self.channel.basic_qos(prefetch_count=prefetch_count)
                self.channel.basic_consume(
                    queue=queue_name,
                    on_message_callback=callback,
                    consumer_tag=consumer_tag,
                    auto_ack=False,  # Manual acknowledgment for reliability
                )
                logger.info(f"Started consuming from {queue_name}")
                self.channel.start_consuming()
        except AMQPChannelError as e:
            logger.error(f"Failed to start consuming from {queue_name}: {e}")
            raise

    def stop_consuming(self) -> None:
        """Stop consuming messages."""
        try:
            if self.channel:
                self.channel.stop_consuming()
                logger.info("Stopped consuming from all queues")
        except AMQPChannelError as e:
            logger.error(f"Failed to stop consuming: {e}")
            raise

    def close(self):
        """Close connection."""
        try:
            if self.connection and not self.connection.is_closed:
                self.connection.close()
                logger.info("RabbitMQ connection closed")
        except (AMQPConnectionError, AMQPChannelError) as e:
            logger.error(f"Error closing RabbitMQ connection: {e}")


# Global message broker instance (lazy initialization)
_message_broker_instance: Optional[MessageBroker] = None


def get_message_broker() -> MessageBroker:
    """Get the global message broker instance (lazy initialization)."""
    global _message_broker_instance
    if _message_broker_instance is None:
        _message_broker_instance = MessageBroker()
    return _message_broker_instance
