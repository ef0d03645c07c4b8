"""
Summary service: stored project summaries. Text is produced elsewhere.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from plantrack.models.base import utcnow
from plantrack.models.summary import Summary
from plantrack.services.projects import get_project

log = structlog.get_logger()


async def get_project_summary(
    session: AsyncSession, org_id: uuid.UUID, project_id: uuid.UUID
) -> Optional[Summary]:
    """Latest summary for the project, or None."""
    await get_project(session, org_id, project_id)
    result = await session.execute(
        select(Summary)
        .where(col(Summary.project_id) == project_id, col(Summary.org_id) == org_id)
        .order_by(col(Summary.updated_at).desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def upsert_summary(
    session: AsyncSession,
    org_id: uuid.UUID,
    project_id: uuid.UUID,
    content: str,
) -> Summary:
    summary = await get_project_summary(session, org_id, project_id)
    if summary:
        summary.content = content
        summary.updated_at = utcnow()
    else:
        summary = Summary(project_id=project_id, org_id=org_id, content=content)
    session.add(summary)
    await session.flush()

    log.info("summary.saved", project_id=str(project_id), summary_id=str(summary.id))
    return summary
