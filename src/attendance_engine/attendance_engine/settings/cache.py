from __future__ import annotations

import threading
import time
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class TimedCache(Generic[T]):
    """Single-value cache refreshed through ``loader`` once ``ttl_seconds`` elapse.

    Owned and passed explicitly (no module-level state); ``timer`` is
    injectable so tests can move time forward.
    """

    def __init__(
        self,
        loader: Callable[[], T],
        *,
        ttl_seconds: float,
        timer: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader
        self._ttl = float(ttl_seconds)
        self._timer = timer
        self._lock = threading.Lock()
        self._value: Optional[T] = None
        self._loaded_at: Optional[float] = None

    def get(self) -> T:
        with self._lock:
            now = self._timer()
            if self._loaded_at is None or now - self._loaded_at >= self._ttl:
                self._value = self._loader()
                self._loaded_at = now
            return self._value  # type: ignore[return-value]

    def invalidate(self) -> None:
        with self._lock:
            self._value = None
            self._loaded_at = None
