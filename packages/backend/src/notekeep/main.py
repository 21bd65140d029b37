"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (tables, engine disposal).
Middleware, CORS, and routers all registered here.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notekeep import __version__
from notekeep.api import api_router
from notekeep.auth.tokens import get_token_codec
from notekeep.config import settings
from notekeep.db.engine import create_tables, engine
from notekeep.middleware.request_id import RequestIdMiddleware
from notekeep.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs
    at shutdown. The token codec is built here so a bad signing config
    fails the boot instead of the first request.
    """
    logger.info(
        "notekeep.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )
    codec = get_token_codec()
    logger.info(
        "notekeep.token_codec_ready",
        algorithm=codec.algorithm,
        lifetime_minutes=int(codec.lifetime.total_seconds() // 60),
    )

    if settings.auto_create_tables:
        await create_tables()
        logger.info("notekeep.tables_ready")

    yield

    logger.info("notekeep.shutdown")
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Notekeep",
        description="Personal notes behind a bearer-token ownership gate",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → Security → RequestId → handler
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    return app


# Default app instance (used by uvicorn: notekeep.main:app)
app = create_app()
