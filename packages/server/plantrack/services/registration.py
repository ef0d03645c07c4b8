"""
Onboarding service: registration and login.

Registration always lands a user *with* a membership: either as founder of a
new organization or as an invitee joining an existing one. Every step runs in
the caller's unit of work, so a failing onboarding step leaves no user row.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from plantrack.core.auth import hash_password, verify_password
from plantrack.core.config import get_settings
from plantrack.core.errors import (
    DuplicateEmail,
    InvalidCredential,
    OnboardingRequired,
    ValidationFailed,
)
from plantrack.models.user import User
from plantrack.services.invites import accept_invite, resolve_invite
from plantrack.services.organizations import create_organization, get_primary_organization

log = structlog.get_logger()
settings = get_settings()


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(
        select(User).where(col(User.email) == normalize_email(email))
    )
    return result.scalar_one_or_none()


async def register_user(
    session: AsyncSession,
    email: str,
    password: str,
    name: str,
    organization_name: Optional[str] = None,
    invite_token: Optional[str] = None,
) -> tuple[User, uuid.UUID]:
    """Create a user and onboard them. Returns (user, organization_id).

    An invite token takes precedence over an organization name.
    """
    organization_name = (organization_name or "").strip() or None
    invite_token = (invite_token or "").strip() or None
    if not organization_name and not invite_token:
        raise OnboardingRequired()

    name = name.strip()
    if not name:
        raise ValidationFailed("Name is required")

    email = normalize_email(email)
    if await get_user_by_email(session, email):
        raise DuplicateEmail()

    if len(password) < settings.password_min_length:
        raise ValidationFailed(
            f"Password must be at least {settings.password_min_length} characters"
        )

    user = User(email=email, password_hash=hash_password(password), name=name)
    session.add(user)
    try:
        await session.flush()
    except IntegrityError as exc:
        raise DuplicateEmail() from exc

    if invite_token:
        org_id = await accept_invite(session, invite_token, user.id)
        flow = "invitee"
    else:
        org = await create_organization(session, organization_name, user.id)
        org_id = org.id
        flow = "founder"

    log.info("auth.registered", user_id=str(user.id), org_id=str(org_id), flow=flow)
    return user, org_id


async def register_invitee(
    session: AsyncSession, token: str, name: str, password: str
) -> tuple[User, uuid.UUID]:
    """Public invite page flow: the account is created for the invited email."""
    invite = await resolve_invite(session, token)
    return await register_user(
        session,
        email=invite.email,
        password=password,
        name=name,
        invite_token=token,
    )


async def login_user(
    session: AsyncSession, email: str, password: str
) -> tuple[User, Optional[uuid.UUID]]:
    """Verify credentials. Returns (user, organization_id or None when unscoped)."""
    user = await get_user_by_email(session, email)
    if not user:
        log.info("auth.login_failure", reason="unknown_email")
        raise InvalidCredential()
    if not verify_password(password, user.password_hash):
        log.info("auth.login_failure", reason="bad_password", user_id=str(user.id))
        raise InvalidCredential()

    org_id = await get_primary_organization(session, user.id)
    log.info("auth.login_success", user_id=str(user.id), org_id=str(org_id) if org_id else None)
    return user, org_id
