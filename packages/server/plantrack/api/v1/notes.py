"""
Note and share-link API endpoints.

POST   /api/notes                 Create a note on a project
PUT    /api/notes/{noteId}        Partial update
PUT    /api/notes/{noteId}/label  Set the photo label
DELETE /api/notes/{noteId}        Delete (and its share links)
POST   /api/notes/{noteId}/share  Get or create a public share link
GET    /api/share/{token}         Public view of a shared note
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from plantrack.core.auth import ScopedUser, require_scope
from plantrack.core.config import get_settings
from plantrack.core.database import get_session
from plantrack.services import notes as note_service
from plantrack.services import shares as share_service
from plantrack_shared.schemas.notes import (
    NoteCreate,
    NoteLabelUpdate,
    NoteRead,
    NoteUpdate,
    ShareCreate,
    ShareLinkResponse,
    SharedNoteRead,
)

settings = get_settings()
router = APIRouter()
public_router = APIRouter()


@router.post("", response_model=NoteRead, status_code=201)
async def create_note(
    body: NoteCreate,
    scope: ScopedUser = Depends(require_scope),
    session: AsyncSession = Depends(get_session),
):
    note = await note_service.create_note(session, scope.org_id, scope.user_id, body)
    return NoteRead.model_validate(note)


@router.put("/{noteId}", response_model=NoteRead)
async def update_note(
    noteId: uuid.UUID,
    body: NoteUpdate,
    scope: ScopedUser = Depends(require_scope),
    session: AsyncSession = Depends(get_session),
):
    note = await note_service.update_note(session, scope.org_id, noteId, body)
    return NoteRead.model_validate(note)


@router.put("/{noteId}/label", response_model=NoteRead)
async def update_note_label(
    noteId: uuid.UUID,
    body: NoteLabelUpdate,
    scope: ScopedUser = Depends(require_scope),
    session: AsyncSession = Depends(get_session),
):
    note = await note_service.update_note_label(session, scope.org_id, noteId, body.label)
    return NoteRead.model_validate(note)


@router.delete("/{noteId}")
async def delete_note(
    noteId: uuid.UUID,
    scope: ScopedUser = Depends(require_scope),
    session: AsyncSession = Depends(get_session),
):
    await note_service.delete_note(session, scope.org_id, noteId)
    return {"success": True}


@router.post("/{noteId}/share", response_model=ShareLinkResponse)
async def share_note(
    noteId: uuid.UUID,
    body: Optional[ShareCreate] = None,
    scope: ScopedUser = Depends(require_scope),
    session: AsyncSession = Depends(get_session),
):
    share = await share_service.create_share(
        session,
        scope.org_id,
        noteId,
        scope.user_id,
        expires_at=body.expires_at if body else None,
    )
    return ShareLinkResponse(url=f"{settings.frontend_url}/share/{share.token}")


@public_router.get("/share/{token}", response_model=SharedNoteRead)
async def get_shared_note(token: str, session: AsyncSession = Depends(get_session)):
    return SharedNoteRead(**await share_service.get_shared_note(session, token))
