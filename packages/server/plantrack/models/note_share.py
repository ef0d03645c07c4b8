"""Public share link for a single note."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, UUIDMixin


class NoteShare(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "note_shares"

    note_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid(),
            sa.ForeignKey("notes.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    org_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    token: str = Field(unique=True, index=True, nullable=False)
    created_by: uuid.UUID = Field(foreign_key="users.id", nullable=False)
    expires_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
