"""
NegotiateAI Backend - User Route Handlers
==========================================

What:  Registration, login and the caller's profile.

Endpoints:
    POST /api/users/register   → 201 {user, token}
    POST /api/users/login      → 200 {user, token}
    GET  /api/users/profile    → 200 {user}
    PUT  /api/users/profile    → 200 {user, token}
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from negotiateai.database import get_db_session
from negotiateai.models.user import User
from negotiateai.schemas.common import ErrorResponse
from negotiateai.schemas.user import (
    AuthResponse,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    UserResponse,
)
from negotiateai.security import get_current_user
from negotiateai.services.user_service import user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Email already registered", "model": ErrorResponse}},
    summary="Create an account",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    user, token = await user_service.register(db, body)
    return AuthResponse(user=user, token=token)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Exchange credentials for a token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    user, token = await user_service.login(db, body)
    return AuthResponse(user=user, token=token)


@router.get(
    "/profile",
    response_model=UserResponse,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="The caller's profile",
)
async def get_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user = await user_service.get_profile(db, current_user.id)
    return UserResponse(user=user)


@router.put(
    "/profile",
    response_model=AuthResponse,
    responses={
        400: {"description": "Email already in use", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
    },
    summary="Update name, email or password",
)
async def update_profile(
    body: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    user, token = await user_service.update_profile(db, current_user.id, body)
    return AuthResponse(user=user, token=token)
