"""
Yolcu Chat WebSocket Gateway

Clients connect with ``?token=<identity token>``, subscribe to rooms they
belong to, and receive every room event published on the bus as
``{"type": <event_type>, "room_id": ..., "data": {...}}``.
"""

import asyncio
import json
import threading
import uuid
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urlsplit
from uuid import UUID

import websockets
from pika.exceptions import AMQPError
from websockets.asyncio.server import ServerConnection, serve

from yolcu.core.auth_utils import InvalidTokenError, decode_access_token
from yolcu.core.authorization import Actor, AuthorizationGuard
from yolcu.core.config import settings
from yolcu.core.enums import RoomEventType
from yolcu.core.logging import (
    get_logger,
    log_shutdown_info,
    log_startup_info,
    setup_logging,
)
from yolcu.core.messaging.broker import MessageBroker
from yolcu.core.observability.metrics import log_counter_increment
from yolcu.db.db import get_session_local
from yolcu.exceptions import ChatError
from yolcu.realtime.registry import SubscriptionRegistry
from yolcu.repositories.room_repo import RoomRepo

logger = get_logger(__name__)

UNAUTHORIZED_CLOSE_CODE = 4401


def token_from_path(path: str) -> Optional[str]:
    """Extract the ``token`` query parameter from a request path."""
    values = parse_qs(urlsplit(path).query).get("token")
    return values[0] if values else None


class RealtimeGateway:
    """Websocket front end for the room event bus."""

    def __init__(
        self,
        registry: Optional[SubscriptionRegistry] = None,
        guard: Optional[AuthorizationGuard] = None,
    ):
        self.registry = registry or SubscriptionRegistry()
        self.guard = guard or AuthorizationGuard(RoomRepo(get_session_local()))

    async def handle_connection(self, websocket: ServerConnection) -> None:
        """Handle a new WebSocket connection."""
        actor = self._authenticate(websocket)
        if actor is None:
            await websocket.close(code=UNAUTHORIZED_CLOSE_CODE, reason="Unauthorized")
            return

        self.registry.register(websocket, actor.user_id)
        logger.info(f"User {actor.user_id} connected from {websocket.remote_address}")

        try:
            await self._send(websocket, {"type": "connection.established"})

            async for message in websocket:
                try:
                    data = json.loads(message)
                except json.JSONDecodeError:
                    await self._send(
                        websocket, {"type": "error", "message": "Invalid JSON format"}
                    )
                    continue
                await self.handle_message(websocket, actor, data)

        except websockets.exceptions.ConnectionClosed:
            logger.info(f"WebSocket connection closed for user {actor.user_id}")
        finally:
            self.registry.drop_connection(websocket)

    async def handle_message(
        self, websocket: ServerConnection, actor: Actor, data: Dict[str, Any]
    ) -> None:
        """Handle incoming WebSocket messages."""
        message_type = data.get("type")

        if message_type == "ping":
            await self._send(websocket, {"type": "pong"})
            return

        if message_type not in ("subscribe", "unsubscribe"):
            await self._send(
                websocket,
                {"type": "error", "message": f"Unknown message type: {message_type}"},
            )
            return

        try:
            room_id = UUID(str(data.get("room_id")))
        except ValueError:
            await self._send(
                websocket,
                {"type": "error", "message": f"Missing or invalid room_id for {message_type}"},
            )
            return

        if message_type == "unsubscribe":
            self.registry.unsubscribe(websocket, room_id)
            await self._send(
                websocket, {"type": "unsubscribed", "room_id": str(room_id)}
            )
            return

        try:
            await asyncio.to_thread(self.guard.require_room_member, room_id, actor)
        except ChatError as e:
            await self._send(
                websocket,
                {"type": "error", "room_id": str(room_id), "error": e.to_dict()},
            )
            return

        self.registry.subscribe(websocket, room_id)
        # A removal delivered while the first check ran must not leave a subscription
        try:
            await asyncio.to_thread(self.guard.require_room_member, room_id, actor)
        except ChatError as e:
            self.registry.unsubscribe(websocket, room_id)
            await self._send(
                websocket,
                {"type": "error", "room_id": str(room_id), "error": e.to_dict()},
            )
            return

        await self._send(
            websocket, {"type": "subscription.confirmed", "room_id": str(room_id)}
        )

    async def dispatch_event(self, event: Dict[str, Any]) -> int:
        """Forward a bus event to the room's subscribers. Returns the delivery count."""
        event_type = event.get("event_type")
        room_id = UUID(str(event.get("room_id")))
        data = event.get("data") or {}
        outgoing = {"type": event_type, "room_id": str(room_id), "data": data}

        delivered = 0
        for connection in self.registry.subscribers(room_id):
            try:
                await self._send(connection, outgoing)
                delivered += 1
            except websockets.exceptions.ConnectionClosed:
                self.registry.drop_connection(connection)

        # Subscriptions that lost their authorization are torn down after delivery
        if event_type == RoomEventType.ROOM_DELETED.value:
            self.registry.drop_room(room_id)
        elif event_type == RoomEventType.MEMBER_REMOVED.value and data.get("user_id"):
            self.registry.drop_user_from_room(room_id, UUID(str(data["user_id"])))

        log_counter_increment(
            "gateway_events_delivered_total",
            value=delivered,
            labels={"event_type": str(event_type)},
        )
        return delivered

    def _authenticate(self, websocket: ServerConnection) -> Optional[Actor]:
        token = token_from_path(websocket.request.path) if websocket.request else None
        if not token:
            return None
        try:
            return decode_access_token(token)
        except InvalidTokenError as e:
            logger.info(f"Rejected websocket identity token: {e}")
            return None

    async def _send(self, connection, payload: Dict[str, Any]) -> None:
        await connection.send(json.dumps(payload, default=str))


def start_event_consumer(
    gateway: RealtimeGateway, loop: asyncio.AbstractEventLoop, instance_id: str
) -> threading.Thread:
    """Consume room events on a worker thread and hand them to the event loop."""

    def on_message(channel, method, properties, body):
        try:
            event = json.loads(body)
        except json.JSONDecodeError:
            event = None
        if not isinstance(event, dict):
            logger.error(f"Dropping malformed room event: {body!r}")
            channel.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
            return

        future = asyncio.run_coroutine_threadsafe(gateway.dispatch_event(event), loop)
        try:
            future.result(timeout=30)
        except (ValueError, TypeError) as e:
            logger.error(f"Dropping invalid room event {properties.message_id}: {e}")
        except FutureTimeoutError:
            logger.warning(f"Timed out delivering room event {properties.message_id}")
        except Exception:
            # The consumer thread must survive a bad event
            logger.exception(f"Failed to deliver room event {properties.message_id}")
        channel.basic_ack(delivery_tag=method.delivery_tag)

    def consume():
        try:
            broker = MessageBroker()
            queue_name = broker.setup_gateway_queue(instance_id)
            broker.start_consuming(
                queue_name, on_message, consumer_tag=f"ws_gateway_{instance_id}"
            )
        except AMQPError as e:
            logger.error(f"Gateway event consumer stopped: {e}")

    thread = threading.Thread(target=consume, name="room-event-consumer", daemon=True)
    thread.start()
    return thread


async def main() -> None:
    """Start the WebSocket server."""
    instance_id = uuid.uuid4().hex[:8]
    gateway = RealtimeGateway()
    start_event_consumer(gateway, asyncio.get_running_loop(), instance_id)

    logger.info(
        f"Starting WebSocket Gateway on ws://{settings.WS_HOST}:{settings.WS_PORT}"
    )
    async with serve(
        gateway.handle_connection,
        settings.WS_HOST,
        settings.WS_PORT,
        ping_interval=20,
        ping_timeout=10,
    ) as server:
        await server.serve_forever()


def run() -> None:
    """Console entry point."""
    setup_logging()
    log_startup_info("Yolcu WebSocket Gateway")
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
    finally:
        log_shutdown_info("Yolcu WebSocket Gateway")


if __name__ == "__main__":
    run()
