import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from medextract.pipeline.clients.transport import ResilientTransport

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown tasks."""
    logger.info("Initializing backend transport...")
    app.state.transport = ResilientTransport()
    logger.info("Backend transport ready")

    yield

    logger.info("Closing backend transport...")
    app.state.transport.close()
