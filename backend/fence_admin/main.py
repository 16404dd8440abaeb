"""FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fence_admin.api.v1 import health, leads
from fence_admin.config import settings
from fence_admin.db import dispose_engine
from fence_admin.logging import setup_logging

# Configure logging before anything else
setup_logging()

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup/shutdown events."""
    logger.info(
        "Starting Fence Admin API",
        debug=settings.debug,
        numbering_prefix=settings.numbering_prefix,
    )

    yield

    logger.info("Shutting down Fence Admin API")
    await dispose_engine()
    logger.info("Database connections disposed")


app = FastAPI(
    title="Fence Admin API",
    description="Lead, quote and job pipeline API",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.backend_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(leads.router, prefix="/api/v1")
