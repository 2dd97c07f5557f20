"""Shared chat room: message log, sessions, notifications and routes."""
from .binder import ConnectionBinder
from .channel import NotificationChannel, WebSocketChannel
from .coordinator import ChatCoordinator
from .exceptions import ChatError, IndexOutOfRangeError, UnknownUserError

__all__ = [
    "ChatCoordinator",
    "ChatError",
    "ConnectionBinder",
    "IndexOutOfRangeError",
    "NotificationChannel",
    "UnknownUserError",
    "WebSocketChannel",
]
