"""Application factory for the FastAPI app.

Centralizes app construction (logging, middleware, handlers, rate limiters,
routers) so tests can build isolated instances.
"""

from __future__ import annotations

from fastapi import FastAPI

from app.api.routes import health_router
from app.core.config import Settings, settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware, security_headers_middleware
from app.core.rate_limit import RateLimiters, build_rate_limiters


def create_app(
    config: Settings | None = None,
    *,
    rate_limiters: RateLimiters | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        config: Settings to build from; defaults to global settings.
        rate_limiters: Pre-built limiters (tests inject ones with a fake clock).

    Returns:
        Configured FastAPI app with middleware, handlers, limiters and routers.
    """
    cfg = config or settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log)

    app = FastAPI(
        title="Board API",
        description=(
            "Membership discussion board API. Posting, login, password reset "
            "and general API calls are guarded by per-client sliding-window "
            "rate limits."
        ),
        version="0.1.0",
    )

    # Each app owns its settings and limiters; nothing is shared between instances
    app.state.settings = cfg
    app.state.rate_limiters = rate_limiters or build_rate_limiters(cfg)

    # Middleware (last registered runs first)
    app.middleware("http")(security_headers_middleware)
    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(health_router)

    return app
