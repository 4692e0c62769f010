"""
A2UI design service FastAPI application.

Entry point for the API server: stored designs, previews, connected devices
and the device WebSocket.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from a2ui_service.config import settings
from a2ui_service.deps import design_storage, device_registry
from a2ui_service.routes import designs as design_routes
from a2ui_service.routes import devices as device_routes
from a2ui_service.routes import ws as ws_routes

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Handles startup and shutdown logic:
    - Configure logging
    - Report the design directory and WebSocket path
    """
    # Startup
    configure_logging()
    designs = await design_storage.list_all()
    logger.info("Loaded %d designs, devices connect at %s", len(designs), settings.WS_PATH)

    yield

    # Shutdown
    logger.info("Shutting down with %d connected devices", len(device_registry))


app = FastAPI(
    title="A2UI",
    docs_url="/docs" if settings.is_development else None,
    redoc_url=None,
    lifespan=lifespan,
)

# Register routes
app.include_router(design_routes.router)
app.include_router(device_routes.router)
app.include_router(ws_routes.router)


@app.get("/health")
async def health():
    """Health check endpoint for uptime monitoring."""
    return {"status": "ok"}
