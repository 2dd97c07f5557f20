"""Binds inbound WebSockets to chat sessions.

Each connection gets its own WebSocketChannel and writer task.  Binding a
new connection for a user replaces the previous binding; the older socket
stays open but receives no further notifications.
"""
import asyncio
import logging

from fastapi import WebSocket

from .channel import DEFAULT_QUEUE_SIZE, NEW_MESSAGE_SIGNAL, WebSocketChannel
from .coordinator import ChatCoordinator
from .exceptions import UnknownUserError

logger = logging.getLogger(__name__)

# 1008 = Policy Violation
CLOSE_UNKNOWN_USER = 1008


class ConnectionBinder:
    """Attaches WebSocket connections to the coordinator's sessions.

    Args:
        coordinator: The shared ChatCoordinator.
        signal: Text frame pushed for each new message.
        queue_size: Pending-signal limit per connection.
    """

    def __init__(
        self,
        coordinator: ChatCoordinator,
        signal: str = NEW_MESSAGE_SIGNAL,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ) -> None:
        self._coordinator = coordinator
        self._signal = signal
        self._queue_size = queue_size

    async def handle(self, websocket: WebSocket, user_id: str) -> None:
        """Drive one connection from bind to disconnect.

        Connections for users without a session are refused before the
        handshake completes.

        Args:
            websocket: The inbound, not yet accepted, WebSocket.
            user_id: Identity the connection belongs to.
        """
        channel = WebSocketChannel(
            websocket,
            signal=self._signal,
            queue_size=self._queue_size,
            label=user_id,
        )
        try:
            self._coordinator.bind_connection(user_id, channel)
        except UnknownUserError:
            logger.warning(f"[WS] Rejecting connection for unknown user {user_id}")
            await websocket.close(code=CLOSE_UNKNOWN_USER)
            return

        await websocket.accept()
        writer = asyncio.create_task(channel.run())
        logger.info(f"[WS] Connection accepted for {user_id}")

        try:
            # Inbound frames carry no protocol; text and binary are only logged
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    logger.info(f"[WS] {user_id} disconnected (code={message.get('code')})")
                    break
                payload = message.get("text")
                if payload is None:
                    payload = message.get("bytes")
                logger.info(f"[WS] {user_id} sent: {payload!r}")
        finally:
            channel.close()
            self._coordinator.release_connection(user_id, channel)
            try:
                await writer
            except Exception as e:
                logger.debug(f"[WS] Writer for {user_id} ended with error: {e}")
