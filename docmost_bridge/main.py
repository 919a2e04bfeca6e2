"""Docmost Bridge — FastAPI application entry point.

Invariants:
    - Routes registered explicitly, one router per resource
    - Global error handlers map BridgeError → structured JSON responses
    - One DocmostGateway per process, built in the lifespan and kept on app.state
    - Any BridgeError from the startup login aborts the process; the client is closed first

Design Decisions:
    - Lifespan context manager owns startup login and shutdown close
    - Gateway owns the httpx client; lifespan closes it on shutdown
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from docmost_bridge.api.error_handlers import register_error_handlers
from docmost_bridge.api.routes import debug, health, pages, search, spaces
from docmost_bridge.config import get_settings
from docmost_bridge.core.errors import BridgeError
from docmost_bridge.infrastructure.observability import setup_logging
from docmost_bridge.services.api_gateway import DocmostGateway

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    gateway = DocmostGateway.from_settings(settings)
    try:
        await gateway.boot()
    except BridgeError as e:
        logger.critical(
            f"Initial login failed: {e.message}",
            extra={"error_code": e.code, "status_code": e.status_code},
        )
        await gateway.aclose()
        raise
    app.state.gateway = gateway
    logger.info(
        f"Docmost bridge started against {settings.docmost_base_url}",
    )
    try:
        yield
    finally:
        logger.info("Docmost bridge shutting down")
        await gateway.aclose()


app = FastAPI(
    title="Docmost Bridge", version="1.0.0", lifespan=lifespan,
)

# Routes — health first, then the shim-key protected resources
app.include_router(health.router)
app.include_router(spaces.router)
app.include_router(search.router)
app.include_router(pages.router)
app.include_router(debug.router)

register_error_handlers(app)


def run() -> None:
    """Console entry point: serve on HOST:PORT."""
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
