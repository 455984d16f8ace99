"""Shared Dependencies - authentication, authorization, clock and report timezone.

Invariants:
    - get_current_user accepts "Authorization: Bearer <token>" first, then the session cookie
    - A token whose user no longer exists is rejected like a forged one
    - Cron endpoints require the exact "Bearer <cron_secret>" header; unset secret rejects all

Design Decisions:
    - get_now / get_report_tz as dependencies: tests pin the calendar via dependency_overrides
    - Cron secret compared with hmac.compare_digest (constant time)
"""

import hmac
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from alphacore.config import get_settings
from alphacore.core.errors import AuthenticationError, PermissionDeniedError
from alphacore.core.permissions import is_admin
from alphacore.infrastructure.database import get_db
from alphacore.infrastructure.security import SessionTokens
from alphacore.models.user import User


def get_tokens() -> SessionTokens:
    settings = get_settings()
    return SessionTokens(settings.secret_key, settings.session_max_age_seconds)


def _extract_token(request: Request) -> str | None:
    header = request.headers.get("authorization")
    if header and header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.cookies.get(get_settings().session_cookie_name)


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    tokens: SessionTokens = Depends(get_tokens),
) -> User:
    token = _extract_token(request)
    if not token:
        raise AuthenticationError()
    user_id = tokens.read(token)
    if user_id is None:
        raise AuthenticationError("Session is invalid or expired")
    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError("Session is invalid or expired")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not is_admin(user):
        raise PermissionDeniedError("Administrator role required")
    return user


async def verify_cron_secret(
    authorization: str | None = Header(None),
) -> None:
    secret = get_settings().cron_secret
    if not secret or not authorization:
        raise AuthenticationError("Invalid cron credentials")
    if not hmac.compare_digest(
        authorization.encode("utf-8"), f"Bearer {secret}".encode("utf-8"),
    ):
        raise AuthenticationError("Invalid cron credentials")


def get_now() -> datetime:
    return datetime.now(timezone.utc)


def get_report_tz() -> ZoneInfo:
    return ZoneInfo(get_settings().report_timezone)
