"""Organization invite (single-use, expiring membership grant)."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from plantrack_shared.schemas.common import InviteStatus, Role

from .base import CreatedAtMixin, UUIDMixin, enum_type


class Invite(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "organization_invites"

    token: str = Field(unique=True, index=True, nullable=False)
    organization_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid(),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    email: str = Field(nullable=False, index=True)
    invited_by: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    role: Role = Field(
        default=Role.MEMBER,
        sa_column=sa.Column(enum_type(Role, "invite_role"), nullable=False),
    )
    status: InviteStatus = Field(
        default=InviteStatus.PENDING,
        sa_column=sa.Column(enum_type(InviteStatus, "invite_status"), nullable=False),
    )
    expires_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    accepted_by: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    accepted_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
