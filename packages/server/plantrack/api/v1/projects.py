"""
Project API endpoints. Every route is confined to the caller's organization.

GET    /api/projects                     List projects (newest first)
POST   /api/projects                     Create
GET    /api/projects/{projectId}         Detail with notes
PUT    /api/projects/{projectId}         Update
DELETE /api/projects/{projectId}         Delete with notes, summaries, shares
GET    /api/projects/{projectId}/notes   Notes (oldest first)
GET    /api/projects/{projectId}/summary Latest stored summary
PUT    /api/projects/{projectId}/summary Store summary text
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from plantrack.core.auth import ScopedUser, require_scope
from plantrack.core.database import get_session
from plantrack.services import notes as note_service
from plantrack.services import projects as project_service
from plantrack.services import summaries as summary_service
from plantrack_shared.schemas.notes import NoteRead, SummaryRead, SummaryUpsert
from plantrack_shared.schemas.projects import (
    ProjectCreate,
    ProjectDetail,
    ProjectRead,
    ProjectUpdate,
)

router = APIRouter()


async def _project_read(
    session: AsyncSession, org_id: uuid.UUID, project_id: uuid.UUID
) -> dict:
    project = await project_service.get_project(session, org_id, project_id)
    notes = await note_service.get_project_notes(session, org_id, project_id)
    summary = await summary_service.get_project_summary(session, org_id, project_id)
    row = project.model_dump()
    row["note_count"] = len(notes)
    row["ai_summary"] = summary.content if summary else None
    row["notes"] = [NoteRead.model_validate(n) for n in notes]
    return row


@router.get("", response_model=list[ProjectRead])
async def list_projects(
    scope: ScopedUser = Depends(require_scope),
    session: AsyncSession = Depends(get_session),
):
    rows = await project_service.get_user_projects(session, scope.org_id)
    return [ProjectRead(**row) for row in rows]


@router.post("", response_model=ProjectRead, status_code=201)
async def create_project(
    body: ProjectCreate,
    scope: ScopedUser = Depends(require_scope),
    session: AsyncSession = Depends(get_session),
):
    project = await project_service.create_project(session, scope.org_id, scope.user_id, body)
    return ProjectRead(**project.model_dump())


@router.get("/{projectId}", response_model=ProjectDetail)
async def get_project(
    projectId: uuid.UUID,
    scope: ScopedUser = Depends(require_scope),
    session: AsyncSession = Depends(get_session),
):
    return ProjectDetail(**await _project_read(session, scope.org_id, projectId))


@router.put("/{projectId}", response_model=ProjectRead)
async def update_project(
    projectId: uuid.UUID,
    body: ProjectUpdate,
    scope: ScopedUser = Depends(require_scope),
    session: AsyncSession = Depends(get_session),
):
    await project_service.update_project(session, scope.org_id, projectId, body)
    row = await _project_read(session, scope.org_id, projectId)
    row.pop("notes")
    return ProjectRead(**row)


@router.delete("/{projectId}")
async def delete_project(
    projectId: uuid.UUID,
    scope: ScopedUser = Depends(require_scope),
    session: AsyncSession = Depends(get_session),
):
    await project_service.delete_project(session, scope.org_id, projectId)
    return {"success": True}


@router.get("/{projectId}/notes", response_model=list[NoteRead])
async def list_notes(
    projectId: uuid.UUID,
    scope: ScopedUser = Depends(require_scope),
    session: AsyncSession = Depends(get_session),
):
    notes = await note_service.get_project_notes(session, scope.org_id, projectId)
    return [NoteRead.model_validate(n) for n in notes]


@router.get("/{projectId}/summary", response_model=Optional[SummaryRead])
async def get_summary(
    projectId: uuid.UUID,
    scope: ScopedUser = Depends(require_scope),
    session: AsyncSession = Depends(get_session),
):
    """Latest summary, or null when none has been stored yet."""
    summary = await summary_service.get_project_summary(session, scope.org_id, projectId)
    return SummaryRead.model_validate(summary) if summary else None


@router.put("/{projectId}/summary", response_model=SummaryRead)
async def put_summary(
    projectId: uuid.UUID,
    body: SummaryUpsert,
    scope: ScopedUser = Depends(require_scope),
    session: AsyncSession = Depends(get_session),
):
    summary = await summary_service.upsert_summary(
        session, scope.org_id, projectId, body.content
    )
    return SummaryRead.model_validate(summary)
