"""
Authentication Service
User registration, credential checks and token issuance
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from medstock.core.exceptions import ValidationError
from medstock.core.logging import get_logger
from medstock.core.security import get_password_hash, verify_password, create_access_token
from medstock.models.auth import User

logger = get_logger("security")


class AuthService:
    """Service for authentication and user management operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def create_user(self, username: str, password: str) -> User:
        """Create new user; an existing username raises ValidationError"""
        db_user = User(
            username=username,
            password_hash=get_password_hash(password),
            is_active=True,
        )

        self.db.add(db_user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ValidationError(f"User {username} already exists")
        self.db.refresh(db_user)

        logger.info(f"User created: {db_user.username}")
        return db_user

    def authenticate_user(self, username: str, password: str) -> Optional[User]:
        """Authenticate user credentials"""
        user = self.get_user_by_username(username)
        if not user:
            logger.info(f"Login failed for unknown user {username}")
            return None

        if not user.is_active:
            return None

        if not verify_password(password, user.password_hash):
            logger.info(f"Login failed for {username}: incorrect password")
            return None

        user.last_login = datetime.now(timezone.utc)
        self.db.commit()

        logger.info(f"User logged in: {username}")
        return user

    def create_user_session(self, user: User) -> Dict[str, Any]:
        """Issue an access token for the user"""
        access_token = create_access_token(data={"sub": str(user.id)})

        return {
            "access_token": access_token,
            "token_type": "bearer",
            "username": user.username,
        }
