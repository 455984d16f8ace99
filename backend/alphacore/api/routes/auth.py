"""Auth Routes - credential login, logout, current user and password change.

Invariants:
    - Unknown email and wrong password give the same 401 (no account probing)
    - Login returns the token in the body AND sets it as an httponly cookie
    - Password change requires the current password
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from alphacore.api.dependencies import get_current_user, get_tokens
from alphacore.config import get_settings
from alphacore.core.errors import AuthenticationError, BusinessRuleError
from alphacore.infrastructure.database import get_db
from alphacore.infrastructure.security import (
    SessionTokens, hash_password_async, verify_password_async,
)
from alphacore.models.user import User
from alphacore.schemas.auth import LoginRequest, PasswordChange, TokenResponse
from alphacore.schemas.user import UserResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    tokens: SessionTokens = Depends(get_tokens),
):
    result = await db.execute(
        select(User).where(func.lower(User.email) == body.email.lower()),
    )
    user = result.scalar_one_or_none()
    stored = user.hashed_password if user is not None else None
    if not await verify_password_async(body.password, stored):
        logger.info("Failed login attempt")
        raise AuthenticationError("Invalid email or password")

    token = tokens.issue(user.id)
    settings = get_settings()
    response.set_cookie(
        settings.session_cookie_name, token,
        max_age=settings.session_max_age_seconds,
        httponly=True, samesite="lax",
    )
    logger.info("User logged in", extra={"user_id": str(user.id)})
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(get_settings().session_cookie_name)
    return {"success": True}


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)):
    return user


@router.post("/password")
async def change_password(
    body: PasswordChange,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not await verify_password_async(body.current_password, user.hashed_password):
        raise BusinessRuleError(
            "Current password is incorrect", "INVALID_PASSWORD",
        )
    user.hashed_password = await hash_password_async(body.new_password)
    await db.commit()
    logger.info("Password changed", extra={"user_id": str(user.id)})
    return {"success": True}
