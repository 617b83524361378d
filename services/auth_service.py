"""
Auth Service - Password hashing and store-backed session tokens.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import hashlib
import hmac
import logging
import secrets

from app.config import settings
from app.exceptions import ConflictError, UnauthorizedError
from domain.schemas import UserRecord
from repositories import InventoryStore

logger = logging.getLogger("freshtrack.auth")

SCRYPT_N = 2**14
SCRYPT_R = 8
SCRYPT_P = 1
SALT_BYTES = 16
KEY_BYTES = 64


def hash_password(password: str) -> str:
    """Salted scrypt hash stored as ``salt$hash`` in hex"""
    salt = secrets.token_bytes(SALT_BYTES)
    key = hashlib.scrypt(
        password.encode("utf-8"), salt=salt, n=SCRYPT_N, r=SCRYPT_R, p=SCRYPT_P, dklen=KEY_BYTES
    )
    return f"{salt.hex()}${key.hex()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        salt_hex, key_hex = stored.split("$", 1)
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(key_hex)
    except ValueError:
        return False
    key = hashlib.scrypt(
        password.encode("utf-8"), salt=salt, n=SCRYPT_N, r=SCRYPT_R, p=SCRYPT_P, dklen=len(expected)
    )
    return hmac.compare_digest(key, expected)


def _aware(moment: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they are stored as UTC
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


class AuthService:
    @staticmethod
    def register(store: InventoryStore, username: str, password: str) -> UserRecord:
        """
        Create a user with a hashed password.

        Raises:
            ConflictError: If the username is already taken
        """
        if store.get_user_by_username(username) is not None:
            raise ConflictError(
                "Username already exists",
                details={"field": "username"},
                code="USERNAME_TAKEN",
            )
        user = store.create_user(username, hash_password(password))
        logger.info(f"Registered user {user.id} ({user.username})")
        return user

    @staticmethod
    def authenticate(store: InventoryStore, username: str, password: str) -> UserRecord:
        user = store.get_user_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            logger.info(f"Failed login for {username!r}")
            raise UnauthorizedError("Invalid username or password")
        return user

    @staticmethod
    def login(
        store: InventoryStore,
        username: str,
        password: str,
        max_age_sec: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> str:
        """Verify credentials and open a session; returns its token"""
        user = AuthService.authenticate(store, username, password)
        return AuthService.open_session(store, user, max_age_sec, now)

    @staticmethod
    def open_session(
        store: InventoryStore,
        user: UserRecord,
        max_age_sec: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> str:
        now = now or datetime.now(timezone.utc)
        lifetime = settings.session_max_age_sec if max_age_sec is None else max_age_sec
        token = secrets.token_urlsafe(32)
        store.create_session(token, user.id, now + timedelta(seconds=lifetime))
        logger.debug(f"Opened session for user {user.id}")
        return token

    @staticmethod
    def logout(store: InventoryStore, token: Optional[str]) -> None:
        if token:
            store.delete_session(token)

    @staticmethod
    def resolve(
        store: InventoryStore, token: Optional[str], now: Optional[datetime] = None
    ) -> UserRecord:
        """
        Map a session token to its user.

        Raises:
            UnauthorizedError: If the token is missing, unknown or expired
        """
        if not token:
            raise UnauthorizedError("Not authenticated")
        session = store.get_session(token)
        if session is None:
            raise UnauthorizedError("Session not found")

        now = now or datetime.now(timezone.utc)
        if _aware(session.expires_at) <= now:
            store.delete_session(token)
            raise UnauthorizedError("Session expired")

        user = store.get_user(session.user_id)
        if user is None:
            raise UnauthorizedError("Session user no longer exists")
        return user
