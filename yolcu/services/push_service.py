"""Push notification fan-out through the Expo push service."""

import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

import httpx

from yolcu.core.config import settings
from yolcu.core.logging import get_logger
from yolcu.core.observability.metrics import (
    log_counter_increment,
    log_histogram_record,
)
from yolcu.exceptions import PushDeliveryError, ValidationError
from yolcu.repositories.push_token_repo import PushTokenRepo
from yolcu.repositories.room_repo import RoomRepo

logger = get_logger(__name__)

DEFAULT_PUSH_TITLE = "New Message"
DEVICE_NOT_REGISTERED = "DeviceNotRegistered"


@dataclass(frozen=True)
class PushDispatchResult:
    sent: int
    invalidated: int


def notification_body(content: Optional[str], file_name: Optional[str]) -> str:
    """Text shown in the notification; file-only messages get a placeholder."""
    if content:
        return content
    if file_name:
        return f"Sent a file: {file_name}"
    return ""


def chunked(items: Sequence[Any], size: int) -> List[Sequence[Any]]:
    return [items[i : i + size] for i in range(0, len(items), size)]


class PushDispatchService:
    """Notify every room member except the author of a new message.

    Tokens the provider reports as ``DeviceNotRegistered`` are deleted so
    they are not retried. Other per-token errors are only logged.
    """

    def __init__(
        self,
        room_repo: RoomRepo,
        push_token_repo: PushTokenRepo,
        http_client: Optional[httpx.Client] = None,
    ):
        self.room_repo = room_repo
        self.push_token_repo = push_token_repo
        self.http_client = http_client or httpx.Client(
            timeout=settings.PUSH_TIMEOUT_SECONDS
        )

    def dispatch(self, record: Dict[str, Any]) -> PushDispatchResult:
        """Send notifications for a ``{user_id, content, room_id}`` record."""
        sender_id, room_id, content = self._validate_record(record)
        started = time.monotonic()

        member_ids = self.room_repo.get_member_ids(room_id, exclude_user_id=sender_id)
        if not member_ids:
            logger.debug(f"No other members in room {room_id}")
            return PushDispatchResult(sent=0, invalidated=0)

        tokens = [
            t.token for t in self.push_token_repo.get_tokens_for_users(member_ids)
        ]
        if not tokens:
            logger.debug(f"No push tokens for members of room {room_id}")
            return PushDispatchResult(sent=0, invalidated=0)

        room = self.room_repo.get_room_by_id(room_id)
        title = room.name if room is not None else DEFAULT_PUSH_TITLE

        messages = [
            {
                "to": token,
                "sound": "default",
                "title": title,
                "body": content,
                "data": {"senderId": str(sender_id), "roomId": str(room_id)},
            }
            for token in tokens
        ]

        invalid_tokens: List[str] = []
        try:
            for chunk in chunked(messages, settings.PUSH_CHUNK_SIZE):
                receipts = self._send_chunk(chunk)
                invalid_tokens.extend(self._collect_invalid_tokens(chunk, receipts))
        finally:
            # Tokens reported by chunks that did go through are removed even
            # when a later chunk fails
            invalidated = self._invalidate_tokens(invalid_tokens)

        log_counter_increment("push_notifications_sent_total", value=len(messages))
        log_histogram_record(
            "push_dispatch_duration_seconds", time.monotonic() - started
        )
        logger.info(f"Sent {len(messages)} notifications for room {room_id}")
        return PushDispatchResult(sent=len(messages), invalidated=invalidated)

    def _invalidate_tokens(self, tokens: List[str]) -> int:
        if not tokens:
            return 0
        invalidated = self.push_token_repo.delete_tokens(tokens)
        logger.info(f"Cleaned up {invalidated} invalid push tokens")
        log_counter_increment("push_tokens_invalidated_total", value=invalidated)
        return invalidated

    def _send_chunk(self, chunk: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "Content-Type": "application/json",
        }
        if settings.EXPO_ACCESS_TOKEN:
            headers["Authorization"] = f"Bearer {settings.EXPO_ACCESS_TOKEN}"

        try:
            response = self.http_client.post(
                settings.EXPO_PUSH_URL, json=list(chunk), headers=headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            log_counter_increment(
                "push_delivery_errors_total",
                labels={"status": str(e.response.status_code)},
            )
            raise PushDeliveryError(
                "Push provider rejected the batch", status=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            log_counter_increment(
                "push_delivery_errors_total", labels={"status": "transport"}
            )
            raise PushDeliveryError(f"Push provider unreachable: {e}") from e

        data = response.json().get("data")
        return data if isinstance(data, list) else []

    def _collect_invalid_tokens(
        self, chunk: Sequence[Dict[str, Any]], receipts: List[Dict[str, Any]]
    ) -> List[str]:
        # Receipts come back in the same order as the submitted messages
        invalid: List[str] = []
        for message, receipt in zip(chunk, receipts):
            if receipt.get("status") != "error":
                continue
            details = receipt.get("details") or {}
            if details.get("error") == DEVICE_NOT_REGISTERED:
                invalid.append(message["to"])
            else:
                logger.error(
                    f"Expo error for {message['to']}: {receipt.get('message')}"
                )
        return invalid

    def _validate_record(self, record: Dict[str, Any]):
        missing = [f for f in ("user_id", "content", "room_id") if not record.get(f)]
        if missing:
            raise ValidationError(
                f"Invalid payload: missing {', '.join(missing)}", missing=missing
            )
        try:
            sender_id = UUID(str(record["user_id"]))
            room_id = UUID(str(record["room_id"]))
        except ValueError as e:
            raise ValidationError("Invalid payload: malformed id") from e
        return sender_id, room_id, str(record["content"])
