"""Shared enums used across the application."""

from enum import Enum


class RoomRole(str, Enum):
    """Relationship between an actor and a room."""

    NON_MEMBER = "non_member"
    MEMBER = "member"
    CREATOR = "creator"


class DeviceType(str, Enum):
    """Platform a push token was registered from."""

    IOS = "ios"
    ANDROID = "android"
    WEB = "web"


class RoomEventType(str, Enum):
    """Events published on the room change-notification bus."""

    MESSAGE_CREATED = "message.created"
    MEMBER_REMOVED = "member.removed"
    ROOM_DELETED = "room.deleted"
    ROOM_LIVE_CHANGED = "room.live_changed"
