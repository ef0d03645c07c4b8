"""
Invite service: single-use, expiring grants of future membership.

Acceptance is linearizable per token: the pending row is re-read under a row
lock and consumed with a guarded UPDATE, so of several concurrent accepts at
most one commits.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from plantrack.core.errors import AccessDenied, AlreadyMember, InvalidInvite
from plantrack.models.invite import Invite
from plantrack.models.membership import Membership
from plantrack.models.organization import Organization
from plantrack.models.user import User
from plantrack.services.organizations import get_membership
from plantrack_shared.schemas.common import InviteStatus, Role

log = structlog.get_logger()


def generate_invite_token() -> str:
    return secrets.token_urlsafe(32)


def _usable(now: datetime):
    """Pending and not yet expired. Compared in SQL so stored tz handling never matters."""
    return (col(Invite.status) == InviteStatus.PENDING) & or_(
        col(Invite.expires_at).is_(None),
        col(Invite.expires_at) > now,
    )


async def create_invite(
    session: AsyncSession,
    organization_id: uuid.UUID,
    email: str,
    inviter_user_id: uuid.UUID,
    role: Role = Role.MEMBER,
    ttl: Optional[timedelta] = None,
) -> Invite:
    """Create a pending invite. Any current member may invite; ttl None never expires."""
    if not await get_membership(session, organization_id, inviter_user_id):
        raise AccessDenied()

    now = datetime.now(timezone.utc)
    invite = Invite(
        token=generate_invite_token(),
        organization_id=organization_id,
        email=email.strip().lower(),
        invited_by=inviter_user_id,
        role=role,
        status=InviteStatus.PENDING,
        expires_at=now + ttl if ttl is not None else None,
    )
    session.add(invite)
    await session.flush()

    log.info(
        "invite.created",
        org_id=str(organization_id),
        invited_by=str(inviter_user_id),
        role=role.value,
    )
    return invite


async def resolve_invite(session: AsyncSession, token: str) -> Invite:
    """Return a usable invite. Not-found, expired and consumed all raise InvalidInvite."""
    result = await session.execute(
        select(Invite).where(
            col(Invite.token) == token,
            _usable(datetime.now(timezone.utc)),
        )
    )
    invite = result.scalar_one_or_none()
    if not invite:
        raise InvalidInvite()
    return invite


async def describe_invite(session: AsyncSession, token: str) -> dict:
    """Invite details for the public landing page."""
    invite = await resolve_invite(session, token)
    org = await session.get(Organization, invite.organization_id)
    if not org:
        raise InvalidInvite()

    inviter_name = None
    if invite.invited_by:
        inviter = await session.get(User, invite.invited_by)
        if inviter:
            inviter_name = inviter.name or inviter.email

    return {
        "organization_name": org.name,
        "invited_by": inviter_name,
        "email": invite.email,
    }


async def accept_invite(
    session: AsyncSession, token: str, accepting_user_id: uuid.UUID
) -> uuid.UUID:
    """Consume an invite and add the user as a member. Returns the org id.

    Runs inside the caller's transaction; any raise here rolls back the
    membership insert along with everything else in the unit of work.
    """
    now = datetime.now(timezone.utc)

    result = await session.execute(
        select(Invite)
        .where(col(Invite.token) == token, _usable(now))
        .with_for_update()
    )
    invite = result.scalar_one_or_none()
    if not invite:
        log.info("invite.accept_rejected", reason="not_usable", user_id=str(accepting_user_id))
        raise InvalidInvite()

    org_id = invite.organization_id
    if await get_membership(session, org_id, accepting_user_id):
        log.info("invite.accept_rejected", reason="already_member", org_id=str(org_id))
        raise AlreadyMember()

    # Invites never grant admin, whatever role the inviter asked for.
    session.add(
        Membership(organization_id=org_id, user_id=accepting_user_id, role=Role.MEMBER)
    )
    try:
        await session.flush()
    except IntegrityError as exc:
        log.info("invite.accept_rejected", reason="membership_conflict", org_id=str(org_id))
        raise AlreadyMember() from exc

    consumed = await session.execute(
        update(Invite)
        .where(
            col(Invite.token) == token,
            col(Invite.status) == InviteStatus.PENDING,
        )
        .values(
            status=InviteStatus.ACCEPTED,
            accepted_by=accepting_user_id,
            accepted_at=now,
        )
    )
    if consumed.rowcount != 1:
        log.info("invite.accept_rejected", reason="consumed_concurrently", org_id=str(org_id))
        raise InvalidInvite()

    log.info("invite.accepted", org_id=str(org_id), user_id=str(accepting_user_id))
    return org_id
