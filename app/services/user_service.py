"""User Service - Signup and Login"""

import asyncio
import logging
from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DuplicateEmail
from app.core.security import get_password_hash, verify_password
from app.models.user import User

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """Service layer for user-related operations"""

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
        """
        Get user by email.

        Args:
            db: Database session
            email: User email (matched case-insensitively)

        Returns:
            User or None if not found
        """
        result = await db.execute(select(User).where(User.email == _normalize_email(email)))
        return result.scalar_one_or_none()

    @staticmethod
    async def create_user(db: AsyncSession, name: str, email: str, password: str) -> User:
        """
        Register a new user with a bcrypt-hashed password.

        Raises:
            DuplicateEmail: if the email is already registered
        """
        if await UserService.get_user_by_email(db, email):
            raise DuplicateEmail()

        hashed_password = await asyncio.to_thread(get_password_hash, password)

        user = User(
            name=name.strip(),
            email=_normalize_email(email),
            hashed_password=hashed_password,
        )
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise DuplicateEmail()
        await db.refresh(user)
        logger.info("User signed up: %s", user.email)
        return user

    @staticmethod
    async def authenticate_user(db: AsyncSession, email: str, password: str) -> Optional[User]:
        """
        Verify credentials.

        Returns:
            The user, or None for an unknown email or a wrong password
            (callers must not tell the two apart)
        """
        user = await UserService.get_user_by_email(db, email)
        if not user:
            logger.warning("Login failed: no user for %s", email)
            return None
        if not await asyncio.to_thread(verify_password, password, user.hashed_password):
            logger.warning("Login failed: wrong password for %s", email)
            return None
        logger.info("Login successful for %s", email)
        return user
