"""Registration, login and session schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, UUID4


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class RegisterRequest(BaseModel):
    """Founder flow sets organizationName; invitee flow sets inviteToken."""

    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    password: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=200)
    organization_name: Optional[str] = Field(
        default=None, alias="organizationName", max_length=200
    )
    invite_token: Optional[str] = Field(default=None, alias="inviteToken")


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class InviteRegisterRequest(BaseModel):
    """Account creation from the public invite page; email comes from the invite."""

    name: str = Field(min_length=1, max_length=200)
    password: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    email: str
    name: Optional[str] = None
    created_at: datetime


class AuthResponse(BaseModel):
    """Issued on register/login. organizationId is null for an unscoped user."""

    model_config = ConfigDict(populate_by_name=True)

    user: UserRead
    organization_id: Optional[UUID4] = Field(default=None, alias="organizationId")
    token: str


class MeResponse(BaseModel):
    user: UserRead
    org_id: Optional[UUID4] = None
