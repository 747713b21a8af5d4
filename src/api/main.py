"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures logging, routes and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import (
    InMemoryUserRepository,
    InMemoryVerificationTokenRepository,
)
from src.adapters.repository.postgres import (
    PostgresUserRepository,
    PostgresVerificationTokenRepository,
    run_migrations,
)
from src.api.v1 import router as v1_router
from src.config.settings import get_settings

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Account Authentication API v1 - Sign-up, email verification, "
        "sign-in and refresh token rotation",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool and runs migrations (postgres backend)
    - Creates process-local stores (memory backend)
    - Closes connection pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")
    pool: ConnectionPool | None = None

    if settings.storage_backend == "memory":
        logger.warning("Using in-memory storage, data is lost on restart")
        app.state.users = InMemoryUserRepository()
        app.state.verification_tokens = InMemoryVerificationTokenRepository()
    else:
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            open=True,
        )

        logger.info("Running database migrations...")
        run_migrations(pool)

        app.state.users = PostgresUserRepository(pool)
        app.state.verification_tokens = PostgresVerificationTokenRepository(pool)

    app.state.pool = pool
    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="authsvc",
    description="Account Authentication API - Email verification and refresh token rotation",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and database are healthy.
    Raises exception if database connection fails.
    """
    pool = getattr(request.app.state, "pool", None)
    if pool is not None:
        with pool.connection() as conn:
            conn.execute("SELECT 1")

    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
