"""Rate limiter interfaces.

The HTTP layer depends on this abstraction (not the concrete implementation)
so the storage backend can be swapped later (e.g., Redis) with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a single rate limit check.

    Attributes:
        success: Whether the request was admitted.
        limit: Max requests per window.
        remaining: Budget left in the current window after this call.
        reset: UNIX epoch seconds derived from the oldest tracked request.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    success: bool
    limit: int
    remaining: int
    reset: int
    retry_after_seconds: int | None = None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def check_limit(self, key: str) -> RateLimitResult:
        """Check and, when admitted, record a request for ``key``.

        Args:
            key: Caller identity (e.g., client IP address).

        Returns:
            RateLimitResult describing whether it was admitted.
        """
        raise NotImplementedError

    @abstractmethod
    def generate_key(self, request: Any) -> str:
        """Derive the limiter key for an inbound request."""
        raise NotImplementedError

    @abstractmethod
    def reset_key(self, key: str) -> None:
        """Forget every tracked request for ``key``."""
        raise NotImplementedError

    @abstractmethod
    def stats(self) -> dict[str, Any]:
        """Return configuration and counters without exposing keys."""
        raise NotImplementedError

    def is_rate_limited(self, key: str) -> bool:
        """Return True when the request for ``key`` is rejected.

        Same side effects as :meth:`check_limit`.
        """
        return not self.check_limit(key).success
