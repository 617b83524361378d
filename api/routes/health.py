"""Health check and utility routes"""

from fastapi import APIRouter, Depends, Request
import logging

from api.dependencies import get_settings
from app.config import Settings

router = APIRouter(tags=["Health"])
logger = logging.getLogger("freshtrack.api.health")


@router.get("/health-check")
def health_check(request: Request, app_settings: Settings = Depends(get_settings)):
    """Basic health check endpoint"""
    return {
        "status": "ok",
        "service": app_settings.app_name,
        "storage": type(request.app.state.store).__name__,
    }
