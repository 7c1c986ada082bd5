"""
NegotiateAI Backend - User & Auth Schemas
==========================================
"""

import uuid
from typing import Optional

from pydantic import EmailStr, Field

from negotiateai.schemas.common import CamelModel, SuccessResponse


class RegisterRequest(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class ProfileUpdateRequest(CamelModel):
    """Every field is optional; omitted fields keep their stored value."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6, max_length=128)


class PublicUser(CamelModel):
    """User fields safe to return to the client (never the password hash)."""

    id: uuid.UUID
    name: str
    email: str
    role: str


class UserResponse(SuccessResponse):
    user: PublicUser


class AuthResponse(UserResponse):
    token: str
