"""
Push Worker CLI

Background worker that turns ``message.created`` room events into push
notifications. Run this as a separate service next to the API.
"""

import json
import sys
from typing import Any, Dict

from pika.exceptions import AMQPError

from yolcu.core.logging import (
    get_logger,
    log_shutdown_info,
    log_startup_info,
    setup_logging,
)
from yolcu.core.messaging.broker import MessageBroker, get_message_broker
from yolcu.core.observability.metrics import log_counter_increment
from yolcu.db.db import get_session_local
from yolcu.exceptions import ChatError, ValidationError
from yolcu.repositories.push_token_repo import PushTokenRepo
from yolcu.repositories.room_repo import RoomRepo
from yolcu.services.push_service import PushDispatchService, notification_body

logger = get_logger(__name__)


def dispatch_record_from_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """Build the ``{user_id, content, room_id}`` record for a message event."""
    data = event.get("data") or {}
    return {
        "user_id": data.get("user_id"),
        "room_id": event.get("room_id") or data.get("room_id"),
        "content": notification_body(data.get("content"), data.get("file_name")),
    }


class PushWorker:
    """Consumes the push dispatch queue."""

    def __init__(self, broker: MessageBroker, push_service: PushDispatchService):
        self.broker = broker
        self.push_service = push_service

    def handle_message(self, channel, method, properties, body) -> None:
        """Ack on success or bad input; dead-letter anything else."""
        try:
            event = json.loads(body)
            record = dispatch_record_from_event(event)
            result = self.push_service.dispatch(record)
            logger.info(
                f"Push dispatch for event {properties.message_id}: "
                f"sent={result.sent} invalidated={result.invalidated}"
            )
            channel.basic_ack(delivery_tag=method.delivery_tag)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Skipping invalid push event {properties.message_id}: {e}")
            log_counter_increment("push_events_skipped_total")
            channel.basic_ack(delivery_tag=method.delivery_tag)
        except ChatError as e:
            logger.error(f"Push dispatch failed for event {properties.message_id}: {e}")
            log_counter_increment(
                "push_events_failed_total", labels={"error_code": e.code}
            )
            channel.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
        except Exception as e:
            logger.exception(
                f"Unexpected error dispatching push for {properties.message_id}: {e}"
            )
            log_counter_increment(
                "push_events_failed_total", labels={"error_code": "unexpected"}
            )
            channel.basic_nack(delivery_tag=method.delivery_tag, requeue=False)

    def start(self) -> None:
        queue_name = self.broker.setup_push_queue()
        self.broker.start_consuming(
            queue_name, self.handle_message, consumer_tag="push_worker"
        )


def build_worker() -> PushWorker:
    session_factory = get_session_local()
    push_service = PushDispatchService(
        RoomRepo(session_factory), PushTokenRepo(session_factory)
    )
    return PushWorker(get_message_broker(), push_service)


def main():
    """Main entry point for the push worker."""
    setup_logging()
    log_startup_info("Yolcu Push Worker")
    try:
        build_worker().start()
    except KeyboardInterrupt:
        logger.info("Push worker stopped by user")
        sys.exit(0)
    except AMQPError as e:
        logger.error(f"Push worker failed: {e}")
        sys.exit(1)
    finally:
        log_shutdown_info("Yolcu Push Worker")


if __name__ == "__main__":
    main()
