"""
Project service: inspection projects, scoped by organization id.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from plantrack.core.errors import NotFound
from plantrack.models.base import utcnow
from plantrack.models.note import Note
from plantrack.models.note_share import NoteShare
from plantrack.models.project import Project
from plantrack.models.summary import Summary
from plantrack_shared.schemas.projects import ProjectCreate, ProjectUpdate

log = structlog.get_logger()


def _project_row(project: Project, note_count: int, ai_summary: str | None) -> dict:
    row = project.model_dump()
    row["note_count"] = note_count or 0
    row["ai_summary"] = ai_summary
    return row


async def create_project(
    session: AsyncSession,
    org_id: uuid.UUID,
    user_id: uuid.UUID,
    req: ProjectCreate,
) -> Project:
    project = Project(
        org_id=org_id,
        user_id=user_id,
        name=req.name,
        description=req.description,
        location=req.location,
        inspector=req.inspector,
        project_date=req.project_date or utcnow(),
    )
    session.add(project)
    await session.flush()

    log.info("project.created", project_id=str(project.id), org_id=str(org_id))
    return project


async def get_user_projects(session: AsyncSession, org_id: uuid.UUID) -> list[dict]:
    """Every project in the org, newest first, with note count and latest summary."""
    note_count = (
        select(func.count(col(Note.id)))
        .where(col(Note.project_id) == Project.id)
        .scalar_subquery()
    )
    latest_summary = (
        select(Summary.content)
        .where(col(Summary.project_id) == Project.id)
        .order_by(col(Summary.updated_at).desc())
        .limit(1)
        .scalar_subquery()
    )
    result = await session.execute(
        select(Project, note_count, latest_summary)
        .where(col(Project.org_id) == org_id)
        .order_by(col(Project.created_at).desc())
    )
    return [_project_row(p, count, summary) for p, count, summary in result.all()]


async def get_project(
    session: AsyncSession, org_id: uuid.UUID, project_id: uuid.UUID
) -> Project:
    """Fetch a project inside the org; anything outside it is NotFound."""
    result = await session.execute(
        select(Project).where(
            col(Project.id) == project_id,
            col(Project.org_id) == org_id,
        )
    )
    project = result.scalar_one_or_none()
    if not project:
        raise NotFound("Project not found")
    return project


async def update_project(
    session: AsyncSession,
    org_id: uuid.UUID,
    project_id: uuid.UUID,
    req: ProjectUpdate,
) -> Project:
    project = await get_project(session, org_id, project_id)
    for field, value in req.model_dump(exclude_unset=True).items():
        if field in ("name", "project_date") and value is None:
            continue
        setattr(project, field, value)

    project.updated_at = utcnow()
    session.add(project)
    await session.flush()

    log.info("project.updated", project_id=str(project.id), org_id=str(org_id))
    return project


async def delete_project(
    session: AsyncSession, org_id: uuid.UUID, project_id: uuid.UUID
) -> None:
    """Delete a project together with its notes, summaries and share links."""
    project = await get_project(session, org_id, project_id)

    note_ids = select(Note.id).where(col(Note.project_id) == project.id)
    await session.execute(
        delete(NoteShare).where(col(NoteShare.note_id).in_(note_ids))
    )
    await session.execute(delete(Note).where(col(Note.project_id) == project.id))
    await session.execute(delete(Summary).where(col(Summary.project_id) == project.id))
    await session.delete(project)
    await session.flush()

    log.info("project.deleted", project_id=str(project_id), org_id=str(org_id))
