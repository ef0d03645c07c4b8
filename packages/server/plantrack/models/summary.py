"""Project summary model (organization-scoped)."""

import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Summary(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "summaries"

    project_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid(),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    org_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    content: str = Field(nullable=False)
