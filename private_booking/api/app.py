"""
FastAPI application for the booking platform.

This is the HTTP API that the web and mobile clients talk to.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from private_booking.api import bookings, items, posts, users
from private_booking.api.errors import setup_exception_handlers
from private_booking.auth import auth_router, web_router
from private_booking.config import Settings, get_settings
from private_booking.integrations.sentry import init_sentry
from private_booking.services import ServiceContainer, bootstrap_admin, build_services

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup app resources."""
    services: ServiceContainer = app.state.services
    settings = services.settings

    if init_sentry(settings):
        logger.info("Sentry error tracking enabled")

    await bootstrap_admin(services)

    logger.info(f"Private Booking API starting in {settings.environment} mode")

    yield

    logger.info("Private Booking API shutting down")


# =============================================================================
# App Setup
# =============================================================================


def create_app(
    settings: Settings | None = None,
    services: ServiceContainer | None = None,
) -> FastAPI:
    """
    Build the application.

    Services are attached at construction time so the app is usable
    without running its lifespan (tests drive it through ASGITransport).
    """
    if settings is None:
        settings = services.settings if services is not None else get_settings()
    if services is None:
        services = build_services(settings)

    configure_logging(settings)

    app = FastAPI(
        title="Private Booking API",
        description="Bookable listings shared between invited users",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.services = services

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Browser session for the web login
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.app_key,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age,
        https_only=settings.is_production,
    )

    setup_exception_handlers(app)

    @app.get("/api/ping")
    async def ping():
        return "pong"

    app.include_router(auth_router)
    app.include_router(web_router)
    app.include_router(items.router)
    app.include_router(bookings.router)
    app.include_router(posts.router)
    app.include_router(users.router)
    app.include_router(users.members_router)

    return app
