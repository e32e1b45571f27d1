"""FastAPI application for the goal bot."""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from config.settings import settings
from shellgoal.api.routes import router
from shellgoal.bot.channel import OutboxRegistry
from shellgoal.runtime import build_dispatcher
from shellgoal.storage.credentials import connect

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler owning the database and HTTP client."""
    # Startup
    logger.info("Starting shellgoal API")
    db = connect(settings.database_path)
    http_client = httpx.Client(timeout=settings.exec_timeout)

    app.state.dispatcher = build_dispatcher(db, http_client)
    app.state.outboxes = OutboxRegistry()

    yield

    # Shutdown
    logger.info("Shutting down shellgoal API")
    await app.state.dispatcher.wait_idle()
    http_client.close()
    db.close()


app = FastAPI(
    title="shellgoal API",
    description="Goal-driven shell automation against a remote Linux sandbox",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routes
app.include_router(router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "shellgoal API",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
