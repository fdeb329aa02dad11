"""Messaging infrastructure for Yolcu Chat."""

from .broker import MessageBroker, get_message_broker, room_routing_key

__all__ = [
    "MessageBroker",
    "get_message_broker",
    "room_routing_key",
]
