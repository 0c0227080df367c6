"""
Media upload service for the Studio backend.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from service_core.config import load_service_config
from service_core.http import install_request_context, register_error_handlers
from service_core.logging_utils import configure_logger
from studio_core import StudioError

from .routes.health import router as health_router


SERVICE_NAME = "studio-media-upload"

logger = configure_logger("studio.media_upload")


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = load_service_config(SERVICE_NAME, StudioError)
    logger.setLevel(config.log_level_value)
    app.state.config = config

    logger.info(
        "Service initialized",
        extra={"event": "service.cold_start", "service": SERVICE_NAME},
    )

    yield


app = FastAPI(
    title="Studio Media Upload",
    version="0.1.0",
    description="Media upload service for the Studio backend",
    lifespan=lifespan,
)

install_request_context(app, logger)
register_error_handlers(app, StudioError, logger)

app.include_router(health_router)
