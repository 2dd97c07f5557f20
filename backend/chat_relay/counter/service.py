"""Lock-guarded non-negative counter."""
import logging
import threading

logger = logging.getLogger(__name__)


class CounterUnderflowError(Exception):
    """Raised when decrementing a counter that is already zero."""


class CounterService:
    def __init__(self, initial: int = 0) -> None:
        if initial < 0:
            raise ValueError("initial must not be negative")
        self._value = initial
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    def decrement(self) -> int:
        """Decrease the counter by one.

        Raises:
            CounterUnderflowError: If the counter is zero.
        """
        with self._lock:
            if self._value == 0:
                raise CounterUnderflowError("Counter is already zero")
            self._value -= 1
            return self._value
