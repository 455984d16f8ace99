"""Security - password hashing and signed session tokens.

Invariants:
    - Passwords stored as "pbkdf2_sha256$<iterations>$<salt_b64>$<hash_b64>", never plain
    - verify_password compares in constant time (hmac.compare_digest)
    - Session tokens are signed and time-limited; a tampered or expired token decodes to None
    - Request handlers hash on a worker thread (the *_async helpers), never on the loop
    - Unknown accounts still pay for one PBKDF2 run

Design Decisions:
    - Iteration count embedded in the stored hash: raising it later keeps old hashes valid
    - itsdangerous URLSafeTimedSerializer over JWT: no claims beyond the user id are needed
"""

import asyncio
import base64
import hashlib
import hmac
import logging
import secrets
import uuid
from functools import lru_cache

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

logger = logging.getLogger(__name__)

_ALGORITHM = "pbkdf2_sha256"
_ITERATIONS = 310_000
_TOKEN_SALT = "alphacore-session"


def _pbkdf2(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def hash_password(password: str) -> str:
    salt = secrets.token_bytes(16)
    digest = _pbkdf2(password, salt, _ITERATIONS)
    return "$".join((
        _ALGORITHM,
        str(_ITERATIONS),
        base64.b64encode(salt).decode("ascii"),
        base64.b64encode(digest).decode("ascii"),
    ))


def verify_password(password: str, stored: str) -> bool:
    try:
        algorithm, iterations, salt_b64, hash_b64 = stored.split("$")
    except ValueError:
        return False
    if algorithm != _ALGORITHM:
        return False
    try:
        salt = base64.b64decode(salt_b64, validate=True)
        rounds = int(iterations)
    except ValueError:
        return False
    digest = _pbkdf2(password, salt, rounds)
    return hmac.compare_digest(
        base64.b64encode(digest).decode("ascii"), hash_b64,
    )


@lru_cache
def _dummy_hash() -> str:
    return hash_password(secrets.token_urlsafe(16))


def _verify_unknown_account(password: str) -> bool:
    verify_password(password, _dummy_hash())
    return False


async def hash_password_async(password: str) -> str:
    """hash_password on a worker thread, so the event loop keeps serving."""
    return await asyncio.to_thread(hash_password, password)


async def verify_password_async(password: str, stored: str | None) -> bool:
    """verify_password on a worker thread.

    A missing hash (unknown account) is checked against a throwaway hash, so
    the response takes as long as a real mismatch and always fails.
    """
    if stored is None:
        return await asyncio.to_thread(_verify_unknown_account, password)
    return await asyncio.to_thread(verify_password, password, stored)


class SessionTokens:
    """Issues and reads signed session tokens carrying a user id."""

    def __init__(self, secret_key: str, max_age_seconds: int):
        self._serializer = URLSafeTimedSerializer(secret_key, salt=_TOKEN_SALT)
        self.max_age_seconds = max_age_seconds

    def issue(self, user_id: uuid.UUID) -> str:
        return self._serializer.dumps({"uid": str(user_id)})

    def read(self, token: str) -> uuid.UUID | None:
        """User id from a token, or None when it does not verify."""
        try:
            payload = self._serializer.loads(token, max_age=self.max_age_seconds)
        except SignatureExpired:
            logger.info("Session token expired")
            return None
        except BadSignature:
            logger.warning("Session token signature invalid")
            return None
        try:
            return uuid.UUID(payload["uid"])
        except (KeyError, TypeError, ValueError):
            return None
