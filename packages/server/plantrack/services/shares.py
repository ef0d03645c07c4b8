"""
Share service: public, optionally expiring links to a single note.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy import and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from plantrack.core.errors import NotFound, ShareExpired
from plantrack.models.note import Note
from plantrack.models.note_share import NoteShare
from plantrack.models.project import Project
from plantrack.services.notes import get_note
from plantrack_shared.schemas.common import NoteType

log = structlog.get_logger()


def note_caption(note: Note) -> str:
    """Photo label, else video transcription, else the note text."""
    if note.type == NoteType.PHOTO and note.image_label:
        return note.image_label
    if note.type == NoteType.VIDEO and note.transcription:
        return note.transcription
    return note.content or ""


async def create_share(
    session: AsyncSession,
    org_id: uuid.UUID,
    note_id: uuid.UUID,
    user_id: uuid.UUID,
    expires_at: Optional[datetime] = None,
) -> NoteShare:
    """Return the note's active share link, creating one if there is none."""
    note = await get_note(session, org_id, note_id)

    now = datetime.now(timezone.utc)
    result = await session.execute(
        select(NoteShare)
        .where(
            col(NoteShare.note_id) == note.id,
            col(NoteShare.org_id) == org_id,
            or_(col(NoteShare.expires_at).is_(None), col(NoteShare.expires_at) > now),
        )
        .order_by(col(NoteShare.created_at).desc())
        .limit(1)
    )
    share = result.scalar_one_or_none()
    if share:
        return share

    share = NoteShare(
        note_id=note.id,
        org_id=org_id,
        token=secrets.token_urlsafe(24),
        created_by=user_id,
        expires_at=expires_at,
    )
    session.add(share)
    await session.flush()

    log.info("share.created", note_id=str(note.id), share_id=str(share.id))
    return share


async def get_shared_note(session: AsyncSession, token: str) -> dict:
    """Public lookup by token. Unknown token is NotFound, lapsed token ShareExpired."""
    now = datetime.now(timezone.utc)
    expired = and_(
        col(NoteShare.expires_at).is_not(None),
        col(NoteShare.expires_at) <= now,
    ).label("expired")
    result = await session.execute(
        select(Note, Project.name, expired)
        .join(NoteShare, col(NoteShare.note_id) == Note.id)
        .join(Project, col(Project.id) == Note.project_id)
        .where(col(NoteShare.token) == token)
    )
    row = result.first()
    if not row:
        raise NotFound("Share not found")

    note, project_name, is_expired = row
    if is_expired:
        log.info("share.expired_access", note_id=str(note.id))
        raise ShareExpired()

    return {
        "type": note.type,
        "caption": note_caption(note),
        "file_key": note.file_key,
        "project_name": project_name,
        "created_at": note.created_at,
    }
