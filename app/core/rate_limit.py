"""Rate limit policies and the FastAPI dependency enforcing them.

Design goals:
- Explicit ownership: the application factory builds one ``RateLimiters``
  container and stores it on ``app.state``; handlers reach it through a
  dependency, never through module-level singletons.
- Independent policies: posting, login, general API and password reset each
  have their own limiter, so the same caller is tracked separately per policy.
- Swap-friendly: handlers depend on ``AbstractRateLimiter`` only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Iterator

from fastapi import Request

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.core.config import Settings, get_request_settings, settings
from app.core.errors import RateLimitAppError
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)


class RateLimitPolicy(str, Enum):
    """Guarded board actions."""

    POST = "post"
    LOGIN = "login"
    API = "api"
    PASSWORD_RESET = "password_reset"


@dataclass(frozen=True)
class RateLimiters:
    """One independently configured limiter per policy."""

    post: AbstractRateLimiter
    login: AbstractRateLimiter
    api: AbstractRateLimiter
    password_reset: AbstractRateLimiter

    def for_policy(self, policy: RateLimitPolicy | str) -> AbstractRateLimiter:
        return getattr(self, RateLimitPolicy(policy).value)

    def __iter__(self) -> Iterator[tuple[RateLimitPolicy, AbstractRateLimiter]]:
        for policy in RateLimitPolicy:
            yield policy, self.for_policy(policy)


def build_rate_limiters(
    config: Settings | None = None,
    *,
    clock: Callable[[], int] | None = None,
) -> RateLimiters:
    """Create a fresh set of policy limiters from settings.

    Args:
        config: Settings to read the policies from; defaults to global settings.
        clock: Optional millisecond clock shared by all limiters (tests).

    Returns:
        RateLimiters with no shared state between policies.
    """

    cfg = (config or settings).rate_limit
    extra = {"clock": clock} if clock is not None else {}

    def _limiter(window_ms: int, max_requests: int) -> InMemorySlidingWindowRateLimiter:
        return InMemorySlidingWindowRateLimiter(
            window_ms=window_ms,
            max_requests=max_requests,
            max_keys=cfg.max_keys,
            **extra,
        )

    return RateLimiters(
        post=_limiter(cfg.post_window_ms, cfg.post_max_requests),
        login=_limiter(cfg.login_window_ms, cfg.login_max_requests),
        api=_limiter(cfg.api_window_ms, cfg.api_max_requests),
        password_reset=_limiter(cfg.password_reset_window_ms, cfg.password_reset_max_requests),
    )


def get_rate_limiters(request: Request) -> RateLimiters:
    """FastAPI dependency returning the limiters owned by the running app."""

    return request.app.state.rate_limiters


def build_rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    """Translate a rejected check into HTTP 429 headers."""

    return {
        "Retry-After": str(result.retry_after_seconds or 0),
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(result.reset),
    }


def enforce_rate_limit(policy: RateLimitPolicy | str) -> Callable[[Request], Awaitable[None]]:
    """Build a FastAPI dependency that consumes budget from ``policy``.

    Usage:
        @router.post("/threads", dependencies=[Depends(enforce_rate_limit("post"))])

    Args:
        policy: Policy whose limiter guards the route.

    Returns:
        Async dependency raising RateLimitAppError (HTTP 429) when the caller
        exhausted the policy's window.
    """

    policy = RateLimitPolicy(policy)

    async def _dependency(request: Request) -> None:
        app_settings = get_request_settings(request).app
        if not app_settings.rate_limit_enabled:
            return

        limiter = get_rate_limiters(request).for_policy(policy)
        key = limiter.generate_key(request)
        result = limiter.check_limit(key)

        log_extra = {
            "policy": policy.value,
            "key_hash": hash_identifier(key),
            "limit": result.limit,
            "remaining": result.remaining,
        }

        if result.success:
            logger.info("rate_limit.allowed", extra=log_extra)
            return

        logger.warning(
            "rate_limit.exceeded",
            extra={**log_extra, "retry_after_s": result.retry_after_seconds},
        )

        headers = {}
        if app_settings.rate_limit_include_headers:
            headers = build_rate_limit_headers(result)

        raise RateLimitAppError(
            code="rate_limit_exceeded",
            message="Too many requests. Try again later.",
            details={
                "policy": policy.value,
                "limit": result.limit,
                "remaining": result.remaining,
                "reset": result.reset,
                "retry_after": result.retry_after_seconds or 0,
            },
            headers=headers,
        )

    return _dependency
