"""
NegotiateAI Backend - User Service
===================================

What:  Registration, login and profile management.
How:   Emails are lower-cased before every lookup and write; passwords are
       bcrypt-hashed (negotiateai.security); every successful register,
       login and profile update returns a fresh JWT.
Who:   Called by the /api/users route handlers.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from negotiateai.exceptions import (
    AuthenticationError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from negotiateai.models.user import User
from negotiateai.schemas.user import (
    LoginRequest,
    ProfileUpdateRequest,
    PublicUser,
    RegisterRequest,
)
from negotiateai.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """
    Responsibilities:
        - register(): create a user, 400 if the email is taken
        - login(): verify credentials, 401 on any mismatch
        - get_profile() / update_profile(): the caller's own record
    """

    async def register(self, db: AsyncSession, request: RegisterRequest) -> Tuple[PublicUser, str]:
        email = _normalize_email(request.email)
        if await self._find_by_email(db, email) is not None:
            raise ValidationError(message="User already exists", field="email")

        now = datetime.now(timezone.utc)
        user = User(
            id=uuid.uuid4(),
            name=request.name.strip(),
            email=email,
            password_hash=hash_password(request.password),
            role="user",
            created_at=now,
            updated_at=now,
        )
        await self._flush(db, user, "register")

        logger.info("User registered: %s", user.id)
        return PublicUser.model_validate(user), create_access_token(user)

    async def login(self, db: AsyncSession, request: LoginRequest) -> Tuple[PublicUser, str]:
        """
        Raises:
            AuthenticationError: unknown email or wrong password (same message
                for both so the endpoint does not reveal registered emails)
        """
        user = await self._find_by_email(db, _normalize_email(request.email))
        if user is None or not verify_password(request.password, user.password_hash):
            raise AuthenticationError(message="Invalid email or password")

        logger.info("User logged in: %s", user.id)
        return PublicUser.model_validate(user), create_access_token(user)

    async def get_profile(self, db: AsyncSession, user_id: uuid.UUID) -> PublicUser:
        user = await self._get(db, user_id)
        return PublicUser.model_validate(user)

    async def update_profile(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        request: ProfileUpdateRequest,
    ) -> Tuple[PublicUser, str]:
        """Apply the provided fields; a new email must not belong to anyone else."""
        user = await self._get(db, user_id)

        if request.name is not None:
            user.name = request.name.strip()
        if request.email is not None:
            email = _normalize_email(request.email)
            if email != user.email:
                existing = await self._find_by_email(db, email)
                if existing is not None and existing.id != user.id:
                    raise ValidationError(message="Email is already in use", field="email")
                user.email = email
        if request.password is not None:
            user.password_hash = hash_password(request.password)

        user.updated_at = datetime.now(timezone.utc)
        await self._flush(db, user, "update_profile")

        logger.info("User profile updated: %s", user.id)
        return PublicUser.model_validate(user), create_access_token(user)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _find_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        try:
            result = await db.execute(select(User).where(User.email == email))
        except SQLAlchemyError as e:
            logger.error("Database error looking up user by email: %s", str(e))
            raise PersistenceError(context={"error_type": type(e).__name__})
        return result.scalar_one_or_none()

    async def _get(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def _flush(self, db: AsyncSession, user: User, operation: str) -> None:
        try:
            db.add(user)
            await db.flush()
        except IntegrityError:
            # Concurrent registration with the same email
            raise ValidationError(message="User already exists", field="email")
        except SQLAlchemyError as e:
            logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
            raise PersistenceError(context={"operation": operation})


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
