"""Application-level exception types.

This module defines errors raised by the HTTP layer, enabling consistent
error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured rate limit context returned to clients."""

    policy: str
    limit: int
    remaining: int
    reset: int
    retry_after: int


@dataclass
class AppError(Exception):
    """Base error for application failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


@dataclass
class RateLimitAppError(AppError):
    """Raised when a caller exhausts a rate limit policy.

    Attributes:
        headers: Response headers describing the limit (Retry-After, X-RateLimit-*).
    """

    headers: dict[str, str] = field(default_factory=dict)
