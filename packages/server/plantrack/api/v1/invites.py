"""
Invite API endpoints.

GET  /api/invites/{token}          Public invite details
POST /api/invites/{token}/accept   Join as the signed-in user
POST /api/invites/{token}/register Create an account for the invited email and join
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from plantrack.api.v1.auth import issue_session
from plantrack.core.auth import get_current_user
from plantrack.core.database import get_session
from plantrack.models.user import User
from plantrack.services import invites as invite_service
from plantrack.services import registration as registration_service
from plantrack_shared.schemas.organizations import InviteAcceptResponse, InviteDetails
from plantrack_shared.schemas.users import AuthResponse, InviteRegisterRequest

log = structlog.get_logger()
router = APIRouter()


@router.get("/{token}", response_model=InviteDetails)
async def get_invite(token: str, session: AsyncSession = Depends(get_session)):
    return InviteDetails(**await invite_service.describe_invite(session, token))


@router.post("/{token}/accept", response_model=InviteAcceptResponse)
async def accept_invite(
    token: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    org_id = await invite_service.accept_invite(session, token, user.id)
    return InviteAcceptResponse(organization_id=org_id)


@router.post("/{token}/register", response_model=AuthResponse, status_code=201)
async def register_from_invite(
    token: str,
    body: InviteRegisterRequest,
    session: AsyncSession = Depends(get_session),
):
    user, org_id = await registration_service.register_invitee(
        session, token, name=body.name, password=body.password
    )
    return issue_session(user, org_id)
