"""Per-user session records.

A Session holds the number of messages the user has not fetched yet and the
NotificationChannel of their live connection, if any.  Sessions are created
on login and kept until the process exits, so unread accounting survives
reconnects and logouts.

Like MessageLog, the registry relies on ChatCoordinator for locking.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .channel import NotificationChannel
from .exceptions import UnknownUserError

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Unread counter and optional live-connection handle for one user."""
    unread: int = 0
    channel: Optional[NotificationChannel] = None


class SessionRegistry:
    """Maps user identifiers to their Session."""

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._sessions

    def user_ids(self) -> List[str]:
        return list(self._sessions)

    def create_or_reset(self, user_id: str, unread: int = 0) -> Session:
        """Create a session for user_id, or reset the unread count of an existing one.

        An existing session keeps its channel, so a re-login does not cut the
        user's live connection off from notifications.

        Args:
            user_id: Authenticated user identifier.
            unread: Unread count to start from.

        Returns:
            The new or reset Session.
        """
        session = self._sessions.get(user_id)
        if session is None:
            session = Session(unread=unread)
            self._sessions[user_id] = session
            logger.debug("Created session for %s (unread=%d)", user_id, unread)
        else:
            session.unread = unread
            logger.debug("Reset session for %s (unread=%d)", user_id, unread)
        return session

    def get(self, user_id: str) -> Optional[Session]:
        return self._sessions.get(user_id)

    def require(self, user_id: str) -> Session:
        """Like get(), but raises UnknownUserError for unknown users."""
        session = self._sessions.get(user_id)
        if session is None:
            raise UnknownUserError(user_id)
        return session

    def set_channel(self, user_id: str, channel: NotificationChannel) -> None:
        """Route user_id's notifications to channel.

        Any previously bound channel is dropped from the session but not
        closed; its connection keeps running until the peer goes away.

        Raises:
            UnknownUserError: If user_id has no session.
        """
        session = self.require(user_id)
        if session.channel is not None and session.channel is not channel:
            logger.info("Replacing notification channel for %s", user_id)
        session.channel = channel

    def clear_channel(self, user_id: str, channel: NotificationChannel) -> bool:
        """Unbind channel from user_id if it is still the bound one.

        Returns:
            True if the channel was removed, False if the user is unknown or
            a newer channel has replaced it.
        """
        session = self._sessions.get(user_id)
        if session is None or session.channel is not channel:
            return False
        session.channel = None
        return True

    def for_each_mut(self, fn: Callable[[str, Session], None]) -> None:
        """Apply fn to every (user_id, session) pair.  Order is unspecified."""
        for user_id, session in self._sessions.items():
            fn(user_id, session)
