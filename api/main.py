"""
Nonprofit Events & Donations API - Main Application.

`create_app` builds the FastAPI application from an explicit Settings
object: the admin authenticator, the payment gateway and the store client
are all created here, once. Run with:

    uvicorn api.main:create_app --factory
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import __version__
from api.auth import AdminAuthenticator
from api.errors import register_error_handlers
from api.settings import Settings, load_settings
from domain.errors import DomainError
from repositories.client import connect, execute, use_client
from services.payment_gateway import PaymentGateway, build_gateway

logger = logging.getLogger(__name__)

SERVICE_NAME = "nonprofit-events-donations-api"


def _check_store(client: Any) -> None:
    try:
        execute(client.table("events").select("id").limit(1), "reach the data store")
    except DomainError as e:
        raise RuntimeError(f"Data store is not reachable: {e.detail}") from e


def create_app(
    settings: Optional[Settings] = None,
    *,
    gateway: Optional[PaymentGateway] = None,
    store: Optional[Any] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: configuration; loaded from the environment when omitted
        gateway: payment gateway; built from the Stripe settings when omitted
        store: Supabase client; connected from the settings at startup when
            omitted

    Raises:
        RuntimeError: admin credentials or JWT secret are missing (here), or
            the store credentials are missing or unreachable (at startup)
    """

    settings = settings or load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    authenticator = AdminAuthenticator(settings)
    if gateway is None:
        gateway = build_gateway(settings.stripe_secret_key, settings.stripe_webhook_secret)
    if store is not None:
        use_client(store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = store if store is not None else connect(settings.supabase_url, settings.supabase_key)
        _check_store(client)
        logger.info(
            "%s %s started (payments %s)",
            SERVICE_NAME,
            __version__,
            "live" if gateway.is_live else "mocked",
        )
        yield

    app = FastAPI(
        title="Nonprofit Events & Donations API",
        description="Events, ticket bookings, donations and community forms for a nonprofit",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.authenticator = authenticator
    app.state.gateway = gateway

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    @app.get("/health", tags=["Health"])
    def health_check():
        """
        Health check endpoint.

        Returns the API status and version.
        """
        return {
            "status": "healthy",
            "version": __version__,
            "service": SERVICE_NAME,
            "payments": "live" if gateway.is_live else "mocked",
        }

    @app.get("/", tags=["Root"])
    def root():
        """
        Root endpoint with API information.
        """
        return {
            "message": "Nonprofit Events & Donations API is running",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    from api.routers import (
        auth,
        bookings,
        community_signups,
        contact,
        donation_options,
        donations,
        events,
        registration,
    )

    app.include_router(auth.router, prefix="/api", tags=["Auth"])
    app.include_router(events.router, prefix="/api", tags=["Events"])
    app.include_router(donations.router, prefix="/api", tags=["Donations"])
    app.include_router(donation_options.router, prefix="/api", tags=["Donation Options"])
    app.include_router(bookings.router, prefix="/api", tags=["Ticket Booking"])
    app.include_router(contact.router, prefix="/api", tags=["Contact"])
    app.include_router(registration.router, prefix="/api", tags=["Registration"])
    app.include_router(community_signups.router, prefix="/api", tags=["Community"])

    return app
