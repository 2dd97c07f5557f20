"""Append-only log of chat messages shared by every reader.

Messages are plain ``"<sender>: <body>"`` strings identified by their
position.  Nothing is ever removed or rewritten, so an index handed out once
stays valid for the lifetime of the process.

The log does no locking of its own; ChatCoordinator serializes access.
"""
from typing import List

from .exceptions import IndexOutOfRangeError


class MessageLog:
    """Ordered, append-only sequence of chat messages."""

    def __init__(self) -> None:
        self._messages: List[str] = []

    def __len__(self) -> int:
        return len(self._messages)

    def append(self, text: str) -> int:
        """Add a message at the end of the log.

        Args:
            text: The formatted message.

        Returns:
            The index the message was stored at.
        """
        self._messages.append(text)
        return len(self._messages) - 1

    def slice_from(self, index: int) -> List[str]:
        """Return every message at position >= index, oldest first.

        Args:
            index: First position to return.  ``len(log)`` yields an empty list.

        Raises:
            IndexOutOfRangeError: If index is negative or past the end of the log.
        """
        if index < 0 or index > len(self._messages):
            raise IndexOutOfRangeError(index, len(self._messages))
        return self._messages[index:]
