"""Initial schema: tenants, memberships, invites and inspection resources.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _enum(name: str, *values: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False, create_constraint=True, length=32)


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=nullable,
        server_default=None if nullable else sa.func.now(),
    )


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        _timestamp("created_at"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "organizations",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_organizations_id", "organizations", ["id"])
    op.create_index("ix_organizations_name", "organizations", ["name"])

    # Integer key doubles as insertion order for the primary-organization rule.
    op.create_table(
        "organization_users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "organization_id",
            sa.Uuid(),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("role", _enum("membership_role", "admin", "member"), nullable=False),
        _timestamp("joined_at"),
        sa.UniqueConstraint("organization_id", "user_id", name="uq_organization_users_org_user"),
    )
    op.create_index("ix_organization_users_organization_id", "organization_users", ["organization_id"])
    op.create_index("ix_organization_users_user_id", "organization_users", ["user_id"])

    op.create_table(
        "organization_invites",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("token", sa.String(), nullable=False),
        sa.Column(
            "organization_id",
            sa.Uuid(),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("invited_by", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("role", _enum("invite_role", "admin", "member"), nullable=False),
        sa.Column("status", _enum("invite_status", "pending", "accepted"), nullable=False),
        _timestamp("expires_at", nullable=True),
        sa.Column("accepted_by", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        _timestamp("accepted_at", nullable=True),
        _timestamp("created_at"),
    )
    op.create_index("ix_organization_invites_id", "organization_invites", ["id"])
    op.create_index("ix_organization_invites_token", "organization_invites", ["token"], unique=True)
    op.create_index(
        "ix_organization_invites_organization_id", "organization_invites", ["organization_id"]
    )
    op.create_index("ix_organization_invites_email", "organization_invites", ["email"])

    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "org_id",
            sa.Uuid(),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("inspector", sa.String(), nullable=True),
        sa.Column("project_date", sa.DateTime(timezone=True), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_projects_id", "projects", ["id"])
    op.create_index("ix_projects_org_id", "projects", ["org_id"])
    op.create_index("ix_projects_user_id", "projects", ["user_id"])

    op.create_table(
        "notes",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "project_id",
            sa.Uuid(),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("org_id", sa.Uuid(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("type", _enum("note_type", "text", "photo", "video"), nullable=False),
        sa.Column("content", sa.String(), nullable=True),
        sa.Column("transcription", sa.String(), nullable=True),
        sa.Column("image_label", sa.String(), nullable=True),
        sa.Column("sub_area", sa.String(), nullable=True),
        sa.Column("file_key", sa.String(), nullable=True),
        _timestamp("created_at"),
    )
    op.create_index("ix_notes_id", "notes", ["id"])
    op.create_index("ix_notes_project_id", "notes", ["project_id"])
    op.create_index("ix_notes_org_id", "notes", ["org_id"])

    op.create_table(
        "summaries",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "project_id",
            sa.Uuid(),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("org_id", sa.Uuid(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("content", sa.String(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_summaries_id", "summaries", ["id"])
    op.create_index("ix_summaries_project_id", "summaries", ["project_id"])
    op.create_index("ix_summaries_org_id", "summaries", ["org_id"])

    op.create_table(
        "note_shares",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "note_id",
            sa.Uuid(),
            sa.ForeignKey("notes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("org_id", sa.Uuid(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("token", sa.String(), nullable=False),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        _timestamp("expires_at", nullable=True),
        _timestamp("created_at"),
    )
    op.create_index("ix_note_shares_id", "note_shares", ["id"])
    op.create_index("ix_note_shares_note_id", "note_shares", ["note_id"])
    op.create_index("ix_note_shares_org_id", "note_shares", ["org_id"])
    op.create_index("ix_note_shares_token", "note_shares", ["token"], unique=True)


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    # Children before parents
    for table in (
        "note_shares",
        "summaries",
        "notes",
        "projects",
        "organization_invites",
        "organization_users",
        "organizations",
        "users",
    ):
        op.drop_table(table)
