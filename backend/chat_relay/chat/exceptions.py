"""Errors raised by the chat core."""


class ChatError(Exception):
    """Base exception for chat state errors."""
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class UnknownUserError(ChatError):
    """Raised when an operation names a user that never logged in."""
    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Unknown user: {user_id}", status_code=403)


class IndexOutOfRangeError(ChatError):
    """Raised when the message log is read past its end.

    Unread counters never exceed the log length, so hitting this means the
    chat state is corrupt.
    """
    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(
            f"Message index {index} out of range for log of length {length}",
            status_code=500,
        )
