"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers, logging, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import InMemoryAccountRepository
from src.adapters.repository.postgres import PostgresAccountRepository, run_migrations
from src.adapters.smtp.console import ConsoleEmailSender
from src.adapters.smtp.sender import SmtpEmailSender
from src.api.errors import register_exception_handlers
from src.api.routes import router
from src.config.settings import Settings, get_settings
from src.domain.ports import EmailSender

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "accounts",
        "description": "Signup, email verification and login",
    },
]


def build_email_sender(settings: Settings) -> EmailSender:
    """Construct the configured mail adapter."""
    if settings.mail_backend == "smtp":
        return SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            from_address=settings.mail_from,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            timeout=settings.smtp_timeout_seconds,
        )
    return ConsoleEmailSender()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates the account store (connection pool + migrations for PostgreSQL)
    - Creates the email sender
    - Closes the connection pool on shutdown
    """
    settings: Settings = app.state.settings

    logger.info("Starting application...")

    pool = None
    if settings.store_backend == "postgres":
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            open=True,
        )
        logger.info("Running database migrations...")
        run_migrations(pool)
        app.state.repository = PostgresAccountRepository(pool)
    else:
        logger.info("Using in-memory account store")
        app.state.repository = InMemoryAccountRepository()

    app.state.pool = pool
    app.state.email_sender = build_email_sender(settings)
    logger.info("Mail backend: %s", settings.mail_backend)

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application for the given settings (environment by default)."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    application = FastAPI(
        title="account-verification",
        description="Account signup with email code verification and password login",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    application.state.settings = settings

    register_exception_handlers(application)
    application.include_router(router, prefix="/api")

    @application.get("/health")
    def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint with database validation.

        Returns 200 OK if the application (and database, when used) is healthy.
        """
        pool = getattr(request.app.state, "pool", None)
        if pool is not None:
            with pool.connection() as conn:
                conn.execute("SELECT 1")

        return {"status": "healthy"}

    return application


app = create_app()
