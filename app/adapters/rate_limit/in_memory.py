"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: the read-filter-write sequence for a key runs under a lock.
- Bounded: at most ``max_keys`` distinct keys are tracked (LRU eviction), and
  a key untouched for ``window_ms`` expires as a whole.
"""

from __future__ import annotations

import math
import threading
from typing import Any, Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.core.client_ip import get_client_ip
from app.utils.simple_cache import SimpleTTLCache, now_ms

KeyGenerator = Callable[[Any], str]

DEFAULT_MAX_KEYS = 1000


def _require_positive_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{name} must be a positive integer")
    return value


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting request timestamps over a sliding window.

    Each key maps to the list of admission timestamps (epoch milliseconds)
    still inside the window. On every check, timestamps older than
    ``now - window_ms`` are dropped and the request is admitted only while the
    remaining count is below ``max_requests``.

    Rejected attempts are not recorded, and the pruned list is not written
    back on rejection: the stored record keeps its TTL and is pruned again on
    the next check.
    """

    def __init__(
        self,
        *,
        window_ms: int,
        max_requests: int,
        key_generator: KeyGenerator | None = None,
        max_keys: int = DEFAULT_MAX_KEYS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            window_ms: Size of the sliding window in milliseconds.
            max_requests: Maximum admitted requests per key within the window.
            key_generator: Optional function mapping a request to a key.
            max_keys: Maximum number of distinct keys tracked at once.
            clock: Time source returning UNIX time in milliseconds.

        Raises:
            ValueError: If window_ms, max_requests or max_keys are invalid.
        """
        self._window_ms = _require_positive_int("window_ms", window_ms)
        self._max_requests = _require_positive_int("max_requests", max_requests)

        self._key_generator = key_generator
        self._clock = clock
        self._lock = threading.RLock()
        self._cache: SimpleTTLCache[list[int]] = SimpleTTLCache(
            ttl=window_ms,
            max_entries=max_keys,
            clock=clock,
        )

    @property
    def window_ms(self) -> int:
        return self._window_ms

    @property
    def max_requests(self) -> int:
        return self._max_requests

    def check_limit(self, key: str) -> RateLimitResult:
        """Check the limit for ``key`` and record the request when admitted.

        Args:
            key: Caller identity. Any string is accepted, including "".

        Returns:
            RateLimitResult with the admission decision and window metadata.
        """
        with self._lock:
            now = self._clock()
            stored = self._cache.get(key) or []
            valid = [ts for ts in stored if now - ts < self._window_ms]

            is_limited = len(valid) >= self._max_requests
            if not is_limited:
                valid.append(now)
                self._cache.set(key, valid)

        oldest = valid[0] if valid else now + self._window_ms
        retry_after: int | None = None
        if is_limited:
            retry_after = max(1, math.ceil((oldest + self._window_ms - now) / 1000))

        return RateLimitResult(
            success=not is_limited,
            limit=self._max_requests,
            remaining=max(0, self._max_requests - len(valid)),
            reset=math.ceil(oldest / 1000),
            retry_after_seconds=retry_after,
        )

    def generate_key(self, request: Any) -> str:
        """Derive the limiter key, using the custom generator when configured."""
        if self._key_generator is not None:
            return self._key_generator(request)
        return get_client_ip(request)

    def reset_key(self, key: str) -> None:
        """Forget every tracked request for ``key``."""
        with self._lock:
            self._cache.delete(key)

    def stats(self) -> dict[str, int | None]:
        """Return policy configuration and cache counters (no keys)."""
        return {
            "window_ms": self._window_ms,
            "max_requests": self._max_requests,
            **self._cache.stats(),
        }
