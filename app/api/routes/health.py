from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from app.core.rate_limit import RateLimiters, enforce_rate_limit, get_rate_limiters

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Health check endpoint.

    Returns a simple status response to verify the API is operational.
    Used by load balancers and monitoring systems to determine service health.

    Returns:
        dict: A dictionary with a single "status" key set to "ok".
    """

    return {"status": "ok"}


@router.get(
    "/health/rate-limits",
    dependencies=[Depends(enforce_rate_limit("api"))],
)
def rate_limit_status(
    limiters: Annotated[RateLimiters, Depends(get_rate_limiters)],
) -> dict:
    """Report each policy's configuration and how many callers it tracks.

    Caller keys are never exposed.
    """

    return {
        "policies": {
            policy.value: limiter.stats()
            for policy, limiter in limiters
        }
    }
