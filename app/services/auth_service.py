from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_, func
from fastapi import HTTPException, status
from datetime import datetime
import logging

from ..models.user import User
from ..core.security import (
    verify_password, get_password_hash, burn_password_check, AuthenticationError
)
from ..schemas.auth import UserLogin, UserRegister, SessionUser
from .validation import is_valid_email, normalize_email

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"

class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def register_user(self, user_data: UserRegister) -> User:
        """Register a new user."""
        if user_data.password != user_data.confirm_password:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Passwords do not match"
            )

        if not is_valid_email(user_data.email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid email format"
            )

        email = normalize_email(user_data.email)

        # Check if user already exists
        existing_user = self.db.query(User).filter(
            or_(User.username == user_data.username, func.lower(User.email) == email)
        ).first()

        if existing_user:
            raise self._already_exists()

        new_user = User(
            username=user_data.username,
            email=email,
            password_hash=get_password_hash(user_data.password),
            is_active=True,
        )

        self.db.add(new_user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration
            self.db.rollback()
            raise self._already_exists()
        self.db.refresh(new_user)

        logger.info(f"Registered user {new_user.username}")
        return new_user

    def authenticate_user(self, login_data: UserLogin) -> SessionUser:
        """Check credentials and return the identity to store in the session."""
        user = self.db.query(User).filter(
            User.username == login_data.username.strip()
        ).first()

        if not user:
            burn_password_check(login_data.password)
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not verify_password(login_data.password, user.password_hash):
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not user.is_active:
            raise AuthenticationError(INVALID_CREDENTIALS)

        user.last_login = datetime.utcnow()
        self.db.commit()

        return SessionUser(id=user.id, username=user.username, email=user.email)

    @staticmethod
    def _already_exists() -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists. Please choose another username/email."
        )
