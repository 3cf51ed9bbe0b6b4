"""Cached value holder with an explicit expiry and an injectable clock."""

import time
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class ExpiringValue(Generic[T]):
    """Holds one value until ``ttl_seconds`` after it was set.

    Args:
        ttl_seconds: Lifetime of a stored value
        clock: Returns the current time in seconds (defaults to time.time)
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._value: Optional[T] = None
        self._expires_at = 0.0

    def get(self) -> Optional[T]:
        """Return the value, or None once it has expired."""
        if self._value is None or self._clock() >= self._expires_at:
            return None
        return self._value

    def set(self, value: T) -> T:
        self._value = value
        self._expires_at = self._clock() + self.ttl_seconds
        return value

    def clear(self) -> None:
        self._value = None
        self._expires_at = 0.0
