"""
Readiness and health routes.
No business logic lives here.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, status

from service_core.openapi import standard_error_responses


router = APIRouter(tags=["health"])


@router.get(
    "/",
    status_code=status.HTTP_200_OK,
    summary="Report that the API service is ready",
    responses=standard_error_responses(),
)
def ready() -> dict:
    return {"message": "api lambda ready"}


@router.get("/health", status_code=status.HTTP_200_OK)
def health(request: Request) -> dict:
    config = getattr(request.app.state, "config", None)
    return {
        "status": "ok",
        "service": "glitch-api",
        "environment": getattr(config, "environment", None),
    }
