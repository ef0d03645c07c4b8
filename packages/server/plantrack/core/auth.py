"""
Authentication and organization scoping for PlanTrack.

Supports:
- Email/password credentials (bcrypt)
- Signed, expiring bearer tokens (JWT) with an optional Redis revocation list
- The access gate: credential -> user -> primary organization scope
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
import redis.asyncio as redis
import structlog
from fastapi import Depends
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from plantrack.core.config import get_settings
from plantrack.core.database import get_session
from plantrack.core.errors import InvalidCredential, NoOrganization, UnknownUser
from plantrack.models.user import User
from plantrack.services import organizations as org_service

log = structlog.get_logger()
settings = get_settings()

credential_header = APIKeyHeader(name="Authorization", auto_error=False)

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    """Hash a password using bcrypt with cost factor 12."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=12)).decode()


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash."""
    return bcrypt.checkpw(password.encode(), hashed.encode())


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_jwt(
    user_id: uuid.UUID,
    *,
    expires_delta: timedelta | None = None,
) -> tuple[str, str]:
    """Create a signed JWT bound to a user. Returns (token, jti)."""
    jti = str(uuid.uuid4())
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": exp,
        "jti": jti,
    }
    token = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    return token, jti


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub", "exp"]},
    )


# ---------------------------------------------------------------------------
# JWT Revocation (Redis)
# ---------------------------------------------------------------------------

_redis_pool: redis.Redis | None = None


async def get_redis() -> redis.Redis:
    """Get or create the Redis connection."""
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = redis.from_url(settings.redis_url, decode_responses=True)
    return _redis_pool


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _redis_pool
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None


async def revoke_jwt(jti: str, ttl_seconds: int) -> None:
    """Add a JWT ID to the revocation list until the token would expire anyway."""
    client = await get_redis()
    await client.setex(f"jwt:revoked:{jti}", max(ttl_seconds, 1), "1")


async def is_jwt_revoked(jti: str) -> bool:
    """Check if a JWT ID has been revoked."""
    client = await get_redis()
    return await client.exists(f"jwt:revoked:{jti}") > 0


# ---------------------------------------------------------------------------
# Access gate
# ---------------------------------------------------------------------------

class ScopedUser:
    """Container for an authenticated user + the organization they are scoped to."""

    def __init__(self, user: User, org_id: uuid.UUID):
        self.user = user
        self.user_id = user.id
        self.org_id = org_id


def parse_bearer(authorization: Optional[str]) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise InvalidCredential()
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise InvalidCredential()
    return token.strip()


async def verify_credential(token: str) -> dict:
    """Decode a credential and reject revoked sessions."""
    try:
        payload = decode_jwt(token)
    except jwt.PyJWTError as exc:
        log.info("auth.credential_rejected", reason=type(exc).__name__)
        raise InvalidCredential() from exc

    jti = payload.get("jti")
    if settings.session_revocation_enabled and jti and await is_jwt_revoked(jti):
        log.info("auth.credential_rejected", reason="revoked")
        raise InvalidCredential()
    return payload


async def authenticate(session: AsyncSession, credential: str) -> User:
    """Resolve a bearer credential to a live user."""
    payload = await verify_credential(credential)
    try:
        user_id = uuid.UUID(payload["sub"])
    except (ValueError, TypeError) as exc:
        log.info("auth.credential_rejected", reason="malformed_subject")
        raise InvalidCredential() from exc

    user = await session.get(User, user_id)
    if not user:
        log.warning("auth.unknown_user", user_id=str(user_id))
        raise UnknownUser()
    return user


async def resolve_scope(session: AsyncSession, user_id: uuid.UUID) -> Optional[uuid.UUID]:
    """The organization a user's operations are confined to; None means unscoped."""
    return await org_service.get_primary_organization(session, user_id)


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------

async def get_current_user(
    authorization: Optional[str] = Depends(credential_header),
    session: AsyncSession = Depends(get_session),
) -> User:
    """Any authenticated user, scoped or not."""
    return await authenticate(session, parse_bearer(authorization))


async def require_scope(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ScopedUser:
    """Authenticated user with a resolved organization scope."""
    org_id = await resolve_scope(session, user.id)
    if org_id is None:
        raise NoOrganization()
    structlog.contextvars.bind_contextvars(user_id=str(user.id), org_id=str(org_id))
    return ScopedUser(user=user, org_id=org_id)
