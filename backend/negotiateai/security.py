"""
NegotiateAI Backend - Password Hashing & JWT Authentication
============================================================

What:  bcrypt password hashing, JWT issuance/verification, and the
       `get_current_user` FastAPI dependency.
How:   Tokens are HS256-signed JWTs with payload {sub, email, role, exp}.
       Clients send them as `Authorization: Bearer <token>`.
Who:   UserService issues tokens; every protected route depends on
       get_current_user (directly or through get_request_context).

Authentication flow:
    1. Client sends Authorization: Bearer <token>
    2. get_current_user() verifies signature and expiry
    3. The `sub` claim is loaded from the users table
    4. Missing/invalid/expired token or deleted user → AuthenticationError (401)
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from negotiateai.config import settings
from negotiateai.database import get_db_session
from negotiateai.exceptions import AuthenticationError, ValidationError
from negotiateai.models.user import User

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72

# Missing headers are reported by get_current_user as 401
bearer_scheme = HTTPBearer(auto_error=False)


# ══════════════════════════════════════════════════════════════════════════
# Password Hashing
# ══════════════════════════════════════════════════════════════════════════

def hash_password(password: str) -> str:
    """Returns a bcrypt hash (cost from settings.bcrypt_rounds)."""
    encoded = password.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_BYTES:
        raise ValidationError(
            message=f"Password must be at most {BCRYPT_MAX_BYTES} bytes",
            field="password",
        )
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(encoded, salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Constant-time comparison; malformed hashes count as a mismatch."""
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        return False


# ══════════════════════════════════════════════════════════════════════════
# JWT
# ══════════════════════════════════════════════════════════════════════════

def create_access_token(user: User, now: Optional[datetime] = None) -> str:
    """
    Issue a signed token for `user`.

    Payload:
        sub:   user id (string UUID)
        email: user email
        role:  user role
        exp:   now + settings.jwt_expire_days
    """
    issued = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "iat": issued,
        "exp": issued + timedelta(days=settings.jwt_expire_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify signature and expiry and return the payload.

    Raises:
        AuthenticationError: Token is malformed, expired, or lacks `sub`.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise AuthenticationError(
            message="Not authorized, token failed",
            context={"reason": str(e)},
        )
    if not payload.get("sub"):
        raise AuthenticationError(message="Not authorized, token failed")
    return payload


# ══════════════════════════════════════════════════════════════════════════
# FastAPI Dependency
# ══════════════════════════════════════════════════════════════════════════

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """
    Resolve the bearer token to a User row.

    Raises:
        AuthenticationError: No token, invalid token, or unknown user.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(message="Not authorized, no token")

    payload = decode_access_token(credentials.credentials)
    try:
        user_id = uuid.UUID(str(payload["sub"]))
    except ValueError:
        raise AuthenticationError(message="Not authorized, token failed")

    user = await db.get(User, user_id)
    if user is None:
        logger.warning("Token subject %s no longer exists", user_id)
        raise AuthenticationError(message="Not authorized, user not found")
    return user
