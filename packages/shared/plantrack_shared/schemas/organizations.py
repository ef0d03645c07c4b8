"""
Organization, membership and invite schemas.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from .common import Role


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class OrgCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200, description="Organization display name")


class InviteCreateRequest(BaseModel):
    email: EmailStr
    role: Role = Role.MEMBER


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class OrgResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    created_at: datetime


class OrgListItem(BaseModel):
    id: uuid.UUID
    name: str
    role: Role  # the requesting user's role in this org
    joined_at: datetime


class MemberRead(BaseModel):
    user_id: uuid.UUID
    email: str
    name: Optional[str] = None
    role: Role
    joined_at: datetime


class InviteCreatedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    invite_token: str = Field(alias="inviteToken")
    invite_url: str = Field(alias="inviteUrl")
    expires_at: Optional[datetime] = Field(default=None, alias="expiresAt")


class InviteDetails(BaseModel):
    """Public view of a pending invite."""

    model_config = ConfigDict(populate_by_name=True)

    organization_name: str = Field(alias="organizationName")
    invited_by: Optional[str] = Field(default=None, alias="invitedBy")
    email: str


class InviteAcceptResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    organization_id: uuid.UUID = Field(alias="organizationId")
