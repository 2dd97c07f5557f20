"""Chat relay backend.

A single shared chat room with per-user unread accounting and WebSocket
"new message" push notifications.
"""
