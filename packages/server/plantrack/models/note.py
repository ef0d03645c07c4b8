"""Inspection note model (organization-scoped)."""

from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from plantrack_shared.schemas.common import NoteType

from .base import CreatedAtMixin, UUIDMixin, enum_type


class Note(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "notes"

    project_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid(),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    org_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    created_by: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    type: NoteType = Field(sa_column=sa.Column(enum_type(NoteType, "note_type"), nullable=False))
    content: Optional[str] = None
    transcription: Optional[str] = None
    image_label: Optional[str] = None
    sub_area: Optional[str] = None
    file_key: Optional[str] = None  # storage object key; bytes live elsewhere
