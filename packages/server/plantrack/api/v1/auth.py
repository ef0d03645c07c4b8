"""
Authentication endpoints.

- Email/password registration (founder or invitee onboarding)
- Login, current-user lookup
- Logout (revokes the presented bearer token when revocation is enabled)
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from plantrack.core.auth import (
    create_jwt,
    credential_header,
    get_current_user,
    parse_bearer,
    resolve_scope,
    revoke_jwt,
    verify_credential,
)
from plantrack.core.config import get_settings
from plantrack.core.database import get_session
from plantrack.models.user import User
from plantrack.services import registration as registration_service
from plantrack_shared.schemas.users import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    RegisterRequest,
    UserRead,
)

log = structlog.get_logger()
settings = get_settings()
router = APIRouter()


def issue_session(user: User, org_id) -> AuthResponse:
    token, _jti = create_jwt(user.id)
    return AuthResponse(
        user=UserRead.model_validate(user),
        organization_id=org_id,
        token=token,
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    session: AsyncSession = Depends(get_session),
):
    """Register with email/password and either found an org or accept an invite."""
    user, org_id = await registration_service.register_user(
        session,
        email=body.email,
        password=body.password,
        name=body.name,
        organization_name=body.organization_name,
        invite_token=body.invite_token,
    )
    return issue_session(user, org_id)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(get_session),
):
    """Authenticate with email/password and receive a bearer token."""
    user, org_id = await registration_service.login_user(session, body.email, body.password)
    return issue_session(user, org_id)


@router.get("/me", response_model=MeResponse)
async def me(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Current user and their scope; org_id is null when they have no organization."""
    org_id = await resolve_scope(session, user.id)
    return MeResponse(user=UserRead.model_validate(user), org_id=org_id)


@router.post("/logout")
async def logout(authorization: Optional[str] = Depends(credential_header)):
    """Revoke the presented token for the rest of its lifetime."""
    payload = await verify_credential(parse_bearer(authorization))
    jti = payload.get("jti")
    if settings.session_revocation_enabled and jti:
        remaining = int(payload["exp"] - datetime.now(timezone.utc).timestamp())
        await revoke_jwt(jti, remaining)
        log.info("auth.logout", user_id=payload.get("sub"))
    return {"success": True}
