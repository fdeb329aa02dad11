"""Realtime delivery of room events to websocket clients."""

from .registry import SubscriptionRegistry

__all__ = ["SubscriptionRegistry"]
