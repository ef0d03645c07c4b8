"""
Organization service: organizations, memberships and the primary-org rule.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from plantrack.core.errors import AccessDenied, NotFound, OperationFailed, ValidationFailed
from plantrack.models.membership import Membership
from plantrack.models.organization import Organization
from plantrack.models.user import User
from plantrack_shared.schemas.common import Role

log = structlog.get_logger()


async def create_organization(
    session: AsyncSession,
    name: str,
    founder_user_id: uuid.UUID,
) -> Organization:
    """Create an org and make the founder its administrator.

    Both rows are flushed into the caller's transaction; a store failure
    surfaces as OperationFailed and the unit of work discards both.
    """
    name = name.strip()
    if not name:
        raise ValidationFailed("Organization name is required")

    org = Organization(name=name)
    try:
        session.add(org)
        await session.flush()

        session.add(
            Membership(
                organization_id=org.id,
                user_id=founder_user_id,
                role=Role.ADMIN,
            )
        )
        await session.flush()
    except SQLAlchemyError as exc:
        log.error("org.create_failed", founder=str(founder_user_id), exc_info=exc)
        raise OperationFailed() from exc

    log.info("org.created", org_id=str(org.id), founder=str(founder_user_id))
    return org


async def get_user_organizations(
    session: AsyncSession, user_id: uuid.UUID
) -> list[tuple[Organization, Role, datetime]]:
    """All orgs a user belongs to, oldest membership first."""
    result = await session.execute(
        select(Organization, Membership.role, Membership.joined_at)
        .join(Membership, col(Membership.organization_id) == Organization.id)
        .where(col(Membership.user_id) == user_id)
        .order_by(col(Membership.joined_at).asc(), col(Membership.id).asc())
    )
    return [(org, role, joined_at) for org, role, joined_at in result.all()]


async def get_primary_organization(
    session: AsyncSession, user_id: uuid.UUID
) -> Optional[uuid.UUID]:
    """Earliest membership wins; insertion order breaks ties."""
    result = await session.execute(
        select(Membership.organization_id)
        .where(col(Membership.user_id) == user_id)
        .order_by(col(Membership.joined_at).asc(), col(Membership.id).asc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_membership(
    session: AsyncSession, organization_id: uuid.UUID, user_id: uuid.UUID
) -> Optional[Membership]:
    result = await session.execute(
        select(Membership).where(
            col(Membership.organization_id) == organization_id,
            col(Membership.user_id) == user_id,
        )
    )
    return result.scalar_one_or_none()


async def get_members(
    session: AsyncSession,
    organization_id: uuid.UUID,
    requesting_user_id: uuid.UUID,
) -> list[dict]:
    """List members of an org. The requester must belong to it."""
    if not await get_membership(session, organization_id, requesting_user_id):
        raise AccessDenied()

    result = await session.execute(
        select(User, Membership)
        .join(Membership, col(Membership.user_id) == User.id)
        .where(col(Membership.organization_id) == organization_id)
        .order_by(col(Membership.joined_at).asc(), col(Membership.id).asc())
    )
    return [
        {
            "user_id": user.id,
            "email": user.email,
            "name": user.name,
            "role": membership.role,
            "joined_at": membership.joined_at,
        }
        for user, membership in result.all()
    ]


async def remove_member(
    session: AsyncSession,
    organization_id: uuid.UUID,
    user_id: uuid.UUID,
    requesting_user_id: uuid.UUID,
) -> None:
    """Remove a member. Admins only, and never themselves."""
    requester = await get_membership(session, organization_id, requesting_user_id)
    if not requester or requester.role != Role.ADMIN:
        raise AccessDenied()
    if user_id == requesting_user_id:
        raise ValidationFailed("Cannot remove yourself from the organization")

    target = await get_membership(session, organization_id, user_id)
    if not target:
        raise NotFound("Member not found")

    await session.delete(target)
    await session.flush()

    log.info(
        "org.member_removed",
        org_id=str(organization_id),
        user_id=str(user_id),
        removed_by=str(requesting_user_id),
    )
