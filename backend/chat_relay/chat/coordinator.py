"""Chat coordinator: the single serialization point for chat state.

The coordinator owns the MessageLog and the SessionRegistry and guards both
with one lock, so login, submit, fetch and bind are atomic and totally
ordered with respect to each other.  The lock only covers in-memory
mutation; notifications are dispatched after it is released.

Thread Safety:
    Every public method may be called from any thread or from the event
    loop.  Methods never block on I/O or on another user's action.
"""
import logging
import threading
from typing import List, Optional

from .channel import NotificationChannel
from .message_log import MessageLog
from .sessions import Session, SessionRegistry

logger = logging.getLogger(__name__)


def format_message(user_id: str, body: str) -> str:
    """Render a message the way it is stored in the log."""
    return f"{user_id}: {body}"


class ChatCoordinator:
    """Orchestrates message submission, unread accounting and fan-out.

    One instance is created per application and shared by every request
    handler (see ``chat_relay.main.create_app``).
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._log = MessageLog()
        self._sessions = SessionRegistry()

    # =========================================================================
    # Operations
    # =========================================================================

    def login(self, user_id: str) -> None:
        """Create or reset user_id's session after a successful authentication.

        The unread count is set to the current log length, so the next fetch
        returns the whole history.  A second login discards the previous
        unread count.  A bound channel is kept.
        """
        with self._lock:
            unread = len(self._log)
            self._sessions.create_or_reset(user_id, unread=unread)
        logger.info(f"[Chat] {user_id} logged in (unread={unread})")

    def submit_message(self, user_id: str, body: str) -> int:
        """Append a message from user_id and notify every live connection.

        Every session's unread count is incremented, the sender's included.

        Args:
            user_id: Sender; must have logged in.
            body: Decoded message text.

        Returns:
            The log index of the new message.

        Raises:
            UnknownUserError: If user_id has no session.
        """
        with self._lock:
            self._sessions.require(user_id)
            index = self._log.append(format_message(user_id, body))
            channels: List[NotificationChannel] = []

            def _bump(_uid: str, session: Session) -> None:
                session.unread += 1
                if session.channel is not None:
                    channels.append(session.channel)

            self._sessions.for_each_mut(_bump)

        logger.info(
            f"[Chat] Message #{index} from {user_id}; notifying {len(channels)} connection(s)"
        )
        self._dispatch(channels)
        return index

    def fetch_unread(self, user_id: str) -> str:
        """Return user_id's unread messages and mark them read.

        Returns:
            Each unread message followed by a newline, oldest first.  Empty
            string when nothing is unread.

        Raises:
            UnknownUserError: If user_id has no session.
        """
        with self._lock:
            session = self._sessions.require(user_id)
            start = len(self._log) - session.unread
            messages = self._log.slice_from(start)
            session.unread = 0

        logger.debug(f"[Chat] Sending {len(messages)} message(s) to {user_id}")
        return "".join(f"{message}\n" for message in messages)

    def bind_connection(self, user_id: str, channel: NotificationChannel) -> None:
        """Route user_id's notifications to channel, replacing any previous one.

        Raises:
            UnknownUserError: If user_id has not logged in.
        """
        with self._lock:
            self._sessions.set_channel(user_id, channel)
        logger.info(f"[Chat] Bound connection for {user_id}")

    def release_connection(self, user_id: str, channel: NotificationChannel) -> bool:
        """Unbind channel after its connection closed.

        Does nothing if another channel has been bound since.

        Returns:
            True if channel was still bound and has been removed.
        """
        with self._lock:
            released = self._sessions.clear_channel(user_id, channel)
        if released:
            logger.info(f"[Chat] Released connection for {user_id}")
        return released

    # =========================================================================
    # Queries
    # =========================================================================

    def has_session(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._sessions

    def get_unread(self, user_id: str) -> int:
        """Current unread count for user_id.

        Raises:
            UnknownUserError: If user_id has no session.
        """
        with self._lock:
            return self._sessions.require(user_id).unread

    def get_channel(self, user_id: str) -> Optional[NotificationChannel]:
        with self._lock:
            session = self._sessions.get(user_id)
            return session.channel if session is not None else None

    @property
    def message_count(self) -> int:
        with self._lock:
            return len(self._log)

    @property
    def session_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    # =========================================================================
    # Internals
    # =========================================================================

    def _dispatch(self, channels: List[NotificationChannel]) -> None:
        """Notify each channel; a failing channel never affects the others."""
        for channel in channels:
            try:
                channel.notify()
            except Exception as e:
                logger.warning(f"[Chat] Notification channel {channel!r} failed: {e}")

