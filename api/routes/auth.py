"""Registration, login and session routes"""

from fastapi import APIRouter, Depends, Request, Response, status
import logging

from api.dependencies import (
    SESSION_TOKEN_KEY,
    get_current_user,
    get_session_token,
    get_settings,
    get_store,
)
from app.config import Settings
from domain.schemas import Credentials, UserRecord, UserResponse
from repositories import InventoryStore
from services.auth_service import AuthService

router = APIRouter(tags=["Auth"])
logger = logging.getLogger("freshtrack.api.auth")


@router.post(
    "/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED
)
def register(
    credentials: Credentials,
    request: Request,
    store: InventoryStore = Depends(get_store),
    app_settings: Settings = Depends(get_settings),
):
    """Create an account and sign it in"""
    user = AuthService.register(store, credentials.username, credentials.password)
    request.session[SESSION_TOKEN_KEY] = AuthService.open_session(
        store, user, max_age_sec=app_settings.session_max_age_sec
    )
    return UserResponse.model_validate(user)


@router.post("/login", response_model=UserResponse)
def login(
    credentials: Credentials,
    request: Request,
    store: InventoryStore = Depends(get_store),
    app_settings: Settings = Depends(get_settings),
):
    AuthService.logout(store, get_session_token(request))
    user = AuthService.authenticate(store, credentials.username, credentials.password)
    request.session[SESSION_TOKEN_KEY] = AuthService.open_session(
        store, user, max_age_sec=app_settings.session_max_age_sec
    )
    logger.info(f"User {user.id} logged in")
    return UserResponse.model_validate(user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(request: Request, store: InventoryStore = Depends(get_store)):
    """Drop the session row and clear the cookie; idempotent"""
    AuthService.logout(store, get_session_token(request))
    request.session.clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/user", response_model=UserResponse)
def current_user(user: UserRecord = Depends(get_current_user)):
    return UserResponse.model_validate(user)
