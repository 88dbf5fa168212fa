"""Application factory for FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers and
lifespan wiring) so tests can build isolated apps with their own settings.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.adapters.notifier.base import AbstractNotifier
from app.adapters.verifier.base import AbstractVerifier
from app.api.routes import health_router, submissions_router
from app.core.config import Settings, settings as default_settings
from app.core.container import build_container
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations


def _allowed_origins(origins: str) -> list[str]:
    parsed = [origin.strip() for origin in origins.split(",") if origin.strip()]
    return ["*"] if not parsed or "*" in parsed else parsed


def create_app(
    app_settings: Settings | None = None,
    *,
    verifier: AbstractVerifier | None = None,
    notifier: AbstractNotifier | None = None,
    configure_logs: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        app_settings: Settings to run with; defaults to the environment settings.
        verifier: Optional verifier override (e.g., for tests).
        notifier: Optional notifier override (e.g., for tests).
        configure_logs: Whether to (re)configure the root logger.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    cfg = app_settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    if configure_logs:
        configure_logging(cfg.log)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        container = await build_container(cfg, verifier=verifier, notifier=notifier)
        app.state.container = container
        try:
            yield
        finally:
            await container.aclose()

    app = FastAPI(
        title="Form Intake API",
        description=(
            "Accepts form submissions protected by Cloudflare Turnstile, rate "
            "limits callers per address, stores submissions in SQLite or a "
            "Redis-compatible key/value store and notifies by email. Stored "
            "submissions can be read back with a bearer token."
        ),
        version="1.0.0",
        debug=cfg.app.debug,
        lifespan=lifespan,
    )
    app.state.settings = cfg

    # Middleware
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_allowed_origins(cfg.app.allowed_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=86400,
    )

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(health_router)
    app.include_router(submissions_router)

    # OpenAPI customizations (security scheme, tags)
    apply_openapi_customizations(app)

    return app
