"""
User Repository - Data access layer for users and login sessions
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from repositories.base import BaseRepository
from domain.models import AppUser, UserSession
from app.exceptions import ConflictError


class UserRepository(BaseRepository[AppUser]):
    """Repository for user data access"""

    def __init__(self, db: Session):
        super().__init__(db, AppUser)

    def get_by_username(self, username: str) -> Optional[AppUser]:
        """Get user by username"""
        return self.db.query(AppUser).filter(AppUser.username == username).first()

    def create_user(self, username: str, password_hash: str) -> AppUser:
        """Create a new user"""
        user = AppUser(username=username, password=password_hash)
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
            return user
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(f"Username {username} already exists")


class SessionRepository(BaseRepository[UserSession]):
    """Repository for login sessions"""

    def __init__(self, db: Session):
        super().__init__(db, UserSession)

    def create_session(
        self, token: str, user_id: int, expires_at: datetime
    ) -> UserSession:
        return self.create(
            UserSession(token=token, user_id=user_id, expires_at=expires_at)
        )
