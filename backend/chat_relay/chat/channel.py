"""Notification channels: best-effort "new message" pushes to live clients.

A channel never blocks its caller and never raises.  Pushes that cannot be
delivered are logged and dropped; clients still get every message through
the fetch endpoint, so a missed push only delays delivery.

WebSocketChannel puts signals on a bounded per-connection queue that a
writer task drains onto the socket.  notify() may be called from any thread.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

from fastapi import WebSocket

logger = logging.getLogger(__name__)

# Default text frame sent for every new message
NEW_MESSAGE_SIGNAL = "new_message"

# Default number of undelivered signals kept per connection
DEFAULT_QUEUE_SIZE = 16

# Queue item telling the writer task to stop
_STOP = None


class NotificationChannel(ABC):
    """Push handle for a single live connection."""

    @abstractmethod
    def notify(self) -> None:
        """Signal the peer that new messages are available.

        Must return immediately and must not raise.
        """


class WebSocketChannel(NotificationChannel):
    """Queue-backed channel whose writer task sends signals over a WebSocket.

    Must be created on the event loop that serves the WebSocket.

    Args:
        websocket: The connection to push to.
        signal: Text frame sent for each notification.
        queue_size: Maximum pending signals; further ones are dropped.
        label: Name used in log messages (normally the user id).
    """

    def __init__(
        self,
        websocket: WebSocket,
        signal: str = NEW_MESSAGE_SIGNAL,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        label: str = "",
    ) -> None:
        self._websocket = websocket
        self._signal = signal
        self._label = label
        self._loop = asyncio.get_running_loop()
        # One extra slot keeps room for the stop marker
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size + 1)
        self._capacity = queue_size
        self._closed = False
        self.sent = 0
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def notify(self) -> None:
        # Queue and counters are only touched on the channel's own loop
        try:
            running: Optional[asyncio.AbstractEventLoop] = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            self._enqueue()
            return

        try:
            self._loop.call_soon_threadsafe(self._enqueue)
        except RuntimeError as e:
            # Event loop already closed
            logger.warning("[WS] Could not hand notification to %s: %s", self._label, e)

    def _enqueue(self) -> None:
        if self._closed:
            logger.debug("[WS] Channel for %s is closed; notification dropped", self._label)
            self.dropped += 1
            return
        if self._queue.qsize() >= self._capacity:
            logger.debug("[WS] Notification queue full for %s; dropping signal", self._label)
            self.dropped += 1
            return
        self._queue.put_nowait(self._signal)

    def close(self) -> None:
        """Stop accepting notifications and let the writer task finish."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_STOP)

    async def run(self) -> None:
        """Drain queued signals onto the WebSocket until closed or a send fails."""
        while True:
            item = await self._queue.get()
            if item is _STOP:
                break
            try:
                await self._websocket.send_text(item)
                self.sent += 1
            except Exception as e:
                logger.debug(f"[WS] Failed to push to {self._label}: {e}")
                self._closed = True
                break
