"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Services are built once here (or passed in by tests) and put
on app.state; lifespan manages the Redis connection and disposes the
database engine on shutdown.

Run with: uvicorn notekeeper.main:create_app --factory
A missing NOTEKEEPER_JWT_SECRET makes create_app() raise
ConfigurationError, so the server never starts half-configured.
"""

from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as aioredis
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notekeeper import __version__
from notekeeper.api import api_router
from notekeeper.config import Settings
from notekeeper.container import Services, build_services
from notekeeper.middleware.rate_limit import RateLimitMiddleware
from notekeeper.middleware.request_id import RequestIdMiddleware
from notekeeper.middleware.request_log import RequestLogMiddleware
from notekeeper.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs
    at shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(
        "notekeeper.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    try:
        client = aioredis.from_url(
            settings.redis_url, encoding="utf-8", decode_responses=True
        )
        await client.ping()
        app.state.redis = client
        logger.info("notekeeper.redis_connected", url=settings.redis_url)
    except Exception as e:
        # Redis only backs rate limiting; the API works without it
        logger.warning("notekeeper.redis_unavailable", error=str(e))
        app.state.redis = None

    yield

    logger.info("notekeeper.shutdown")

    if app.state.redis is not None:
        await app.state.redis.aclose()
        app.state.redis = None

    database = app.state.services.database
    if database is not None:
        await database.dispose()


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[Services] = None,
) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or Settings()
    services = services or build_services(settings)

    app = FastAPI(
        title="Notekeeper",
        description="Personal notes API with per-user ownership",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.services = services
    app.state.redis = None

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → RequestLog → Security → RateLimit → CORS → handler

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLogMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router)

    return app
