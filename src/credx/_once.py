"""
Initialize-once cell for process-wide shared values.
"""

import threading
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class OnceCell(Generic[T]):
    """Holds at most one value. Concurrent initializers converge on the first stored value."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: Optional[T] = None

    def get(self) -> Optional[T]:
        return self._value

    def set_if_absent(self, value: T) -> T:
        """Store value unless another one won already. Returns the stored value."""
        with self._lock:
            if self._value is None:
                self._value = value
            return self._value

    def get_or_init(self, factory: Callable[[], T]) -> T:
        value = self._value
        if value is not None:
            return value
        return self.set_if_absent(factory())

    def clear(self) -> None:
        with self._lock:
            self._value = None
