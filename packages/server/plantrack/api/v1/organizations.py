"""
Organization API endpoints.

GET    /api/organizations                          Orgs the user belongs to
POST   /api/organizations                          Found a new org
GET    /api/organizations/{orgId}/members          Members (members only)
DELETE /api/organizations/{orgId}/members/{userId} Remove a member (admins only)
POST   /api/organizations/{orgId}/invite           Invite by email
"""

from __future__ import annotations

import uuid
from datetime import timedelta

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from plantrack.core.auth import get_current_user
from plantrack.core.config import get_settings
from plantrack.core.database import get_session
from plantrack.models.user import User
from plantrack.services import invites as invite_service
from plantrack.services import organizations as org_service
from plantrack_shared.schemas.organizations import (
    InviteCreatedResponse,
    InviteCreateRequest,
    MemberRead,
    OrgCreateRequest,
    OrgListItem,
    OrgResponse,
)

log = structlog.get_logger()
settings = get_settings()
router = APIRouter()


@router.get("", response_model=list[OrgListItem])
async def list_orgs(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """List orgs the authenticated user belongs to, oldest membership first."""
    rows = await org_service.get_user_organizations(session, user.id)
    return [
        OrgListItem(id=org.id, name=org.name, role=role, joined_at=joined_at)
        for org, role, joined_at in rows
    ]


@router.post("", response_model=OrgResponse, status_code=201)
async def create_org(
    body: OrgCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Create a new organization. The creator becomes its administrator."""
    org = await org_service.create_organization(session, body.name, user.id)
    return OrgResponse.model_validate(org)


@router.get("/{orgId}/members", response_model=list[MemberRead])
async def list_members(
    orgId: uuid.UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    members = await org_service.get_members(session, orgId, user.id)
    return [MemberRead(**m) for m in members]


@router.delete("/{orgId}/members/{userId}")
async def remove_member(
    orgId: uuid.UUID,
    userId: uuid.UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await org_service.remove_member(session, orgId, userId, user.id)
    return {"success": True}


@router.post("/{orgId}/invite", response_model=InviteCreatedResponse, status_code=201)
async def create_invite(
    orgId: uuid.UUID,
    body: InviteCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Create an invite link. Delivering it (email etc.) is up to the caller."""
    invite = await invite_service.create_invite(
        session,
        orgId,
        body.email,
        user.id,
        role=body.role,
        ttl=timedelta(days=settings.invite_ttl_days),
    )
    return InviteCreatedResponse(
        invite_token=invite.token,
        invite_url=f"{settings.frontend_url}/invite/{invite.token}",
        expires_at=invite.expires_at,
    )
