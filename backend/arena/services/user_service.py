"""User service - handles user management and credential checks"""

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from arena.models.user import User
from arena.schemas.user import SignupRequest, UpdateUserRequest, UserProfile
from arena.core.security import get_password_hash, verify_password
from arena.core.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    UnAuthorizedError,
)
import logging

logger = logging.getLogger(__name__)


class UserService:
    """Service for user management"""

    @staticmethod
    def create_user(db: Session, user_data: SignupRequest) -> User:
        """
        Create new user

        Args:
            db: Database session
            user_data: Signup data

        Returns:
            Created user (flushed, not committed)
        """
        existing = db.query(User).filter(User.email == user_data.email).first()
        if existing:
            raise ConflictError("email")

        user = User(
            email=user_data.email,
            name=user_data.name,
            avatar=user_data.avatar.value,
            password_hash=get_password_hash(user_data.password),
        )

        db.add(user)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            raise ConflictError("email")

        logger.info(f"Created user: {user.email} (id: {user.id})")
        return user

    @staticmethod
    def verify_credentials(db: Session, email: str, password: str) -> UserProfile:
        """
        Check login credentials

        Args:
            db: Database session
            email: Login email
            password: Plain text password

        Returns:
            Profile of the authenticated user

        Raises:
            BadRequestError: Unknown email
            UnAuthorizedError: Wrong password
        """
        user = db.query(User).filter(User.email == email).first()

        if not user:
            raise BadRequestError("email")

        if not verify_password(password, user.password_hash):
            raise UnAuthorizedError("password")

        logger.info(f"User authenticated: {email}")
        return UserProfile.model_validate(user)

    @staticmethod
    def get_user(db: Session, user_id: int) -> UserProfile:
        """Get user profile by ID"""
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("user")
        return UserProfile.model_validate(user)

    @staticmethod
    def update_user(db: Session, user_id: int, changes: UpdateUserRequest) -> UserProfile:
        """
        Update name and/or email

        Args:
            db: Database session
            user_id: User ID
            changes: Fields to update

        Returns:
            Updated profile
        """
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("user")

        if changes.email is not None and changes.email != user.email:
            taken = db.query(User).filter(User.email == changes.email, User.id != user_id).first()
            if taken:
                raise ConflictError("email")
            user.email = changes.email
        if changes.name is not None:
            user.name = changes.name

        db.commit()
        db.refresh(user)

        logger.info(f"Updated user: {user.id}")
        return UserProfile.model_validate(user)


# Singleton instance
user_service = UserService()
