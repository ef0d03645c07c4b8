"""
Note service: text, photo and video notes on a project.

Only metadata lives here; ``file_key`` points at an object in external storage.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from plantrack.core.errors import NotFound, ValidationFailed
from plantrack.models.note import Note
from plantrack.models.note_share import NoteShare
from plantrack.services.projects import get_project
from plantrack_shared.schemas.common import NoteType
from plantrack_shared.schemas.notes import NoteCreate, NoteUpdate

log = structlog.get_logger()


async def create_note(
    session: AsyncSession,
    org_id: uuid.UUID,
    user_id: uuid.UUID,
    req: NoteCreate,
) -> Note:
    project = await get_project(session, org_id, req.project_id)
    if req.type == NoteType.TEXT and not (req.content or "").strip():
        raise ValidationFailed("Text notes require content")

    note = Note(
        project_id=project.id,
        org_id=org_id,
        created_by=user_id,
        type=req.type,
        content=req.content,
        transcription=req.transcription,
        image_label=req.image_label,
        sub_area=req.sub_area,
        file_key=req.file_key,
    )
    session.add(note)
    await session.flush()

    log.info("note.created", note_id=str(note.id), project_id=str(project.id), type=req.type.value)
    return note


async def get_project_notes(
    session: AsyncSession, org_id: uuid.UUID, project_id: uuid.UUID
) -> list[Note]:
    """Notes of a project, oldest first."""
    await get_project(session, org_id, project_id)
    result = await session.execute(
        select(Note)
        .where(col(Note.project_id) == project_id, col(Note.org_id) == org_id)
        .order_by(col(Note.created_at).asc())
    )
    return list(result.scalars().all())


async def get_note(session: AsyncSession, org_id: uuid.UUID, note_id: uuid.UUID) -> Note:
    result = await session.execute(
        select(Note).where(col(Note.id) == note_id, col(Note.org_id) == org_id)
    )
    note = result.scalar_one_or_none()
    if not note:
        raise NotFound("Note not found")
    return note


async def update_note_label(
    session: AsyncSession,
    org_id: uuid.UUID,
    note_id: uuid.UUID,
    label: Optional[str],
) -> Note:
    note = await get_note(session, org_id, note_id)
    note.image_label = label
    session.add(note)
    await session.flush()

    log.info("note.label_updated", note_id=str(note.id))
    return note


async def update_note(
    session: AsyncSession,
    org_id: uuid.UUID,
    note_id: uuid.UUID,
    req: NoteUpdate,
) -> Note:
    changes = req.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationFailed("No fields to update")

    note = await get_note(session, org_id, note_id)
    if note.type == NoteType.TEXT and not (changes.get("content", note.content) or "").strip():
        raise ValidationFailed("Text notes require content")
    for field, value in changes.items():
        setattr(note, field, value)
    session.add(note)
    await session.flush()

    log.info("note.updated", note_id=str(note.id), fields=sorted(changes))
    return note


async def delete_note(session: AsyncSession, org_id: uuid.UUID, note_id: uuid.UUID) -> None:
    note = await get_note(session, org_id, note_id)
    await session.execute(delete(NoteShare).where(col(NoteShare.note_id) == note.id))
    await session.delete(note)
    await session.flush()

    log.info("note.deleted", note_id=str(note_id), org_id=str(org_id))
