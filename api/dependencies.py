"""
API dependencies for dependency injection
"""

from fastapi import Depends, Request

from app.config import Settings
from domain.schemas import UserRecord
from repositories import InventoryStore
from services.auth_service import AuthService
from services.extraction_service import ReceiptExtractionService

SESSION_TOKEN_KEY = "token"


def get_store(request: Request) -> InventoryStore:
    """
    Entity store dependency for FastAPI routes.

    Usage:
        @router.get("/example")
        def example(store: InventoryStore = Depends(get_store)):
            # Use the store here
            pass
    """
    return request.app.state.store


def get_extractor(request: Request) -> ReceiptExtractionService:
    return request.app.state.extractor


def get_settings(request: Request) -> Settings:
    """Settings the app was built with"""
    return request.app.state.settings


def get_session_token(request: Request):
    return request.session.get(SESSION_TOKEN_KEY)


def get_current_user(
    request: Request, store: InventoryStore = Depends(get_store)
) -> UserRecord:
    """Resolve the signed session cookie to a user, or fail with 401"""
    return AuthService.resolve(store, get_session_token(request))
