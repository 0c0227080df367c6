"""
API service for the Glitch website backend.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from glitch_core import GlitchError
from service_core.config import load_service_config
from service_core.http import install_request_context, register_error_handlers
from service_core.logging_utils import configure_logger

from .routes.health import router as health_router


SERVICE_NAME = "glitch-api"

logger = configure_logger("glitch.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Cold start: load configuration once and share it read-only across requests.
    """
    config = load_service_config(SERVICE_NAME, GlitchError)
    logger.setLevel(config.log_level_value)
    app.state.config = config

    logger.info(
        "Service initialized",
        extra={"event": "service.cold_start", "service": SERVICE_NAME},
    )

    yield


app = FastAPI(
    title="Glitch API",
    version="0.1.0",
    description="Backend API for the Glitch website",
    lifespan=lifespan,
)

install_request_context(app, logger)
register_error_handlers(app, GlitchError, logger)

app.include_router(health_router)
