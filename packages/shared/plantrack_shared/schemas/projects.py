from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .notes import NoteRead


class ProjectBase(BaseModel):
    name: str = Field(min_length=1, max_length=300)
    description: Optional[str] = None
    location: Optional[str] = None
    inspector: Optional[str] = None


class ProjectCreate(ProjectBase):
    project_date: Optional[datetime] = Field(default=None, alias="projectDate")

    model_config = ConfigDict(populate_by_name=True)


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=300)
    description: Optional[str] = None
    location: Optional[str] = None
    inspector: Optional[str] = None
    project_date: Optional[datetime] = Field(default=None, alias="projectDate")

    model_config = ConfigDict(populate_by_name=True)


class ProjectRead(ProjectBase):
    id: UUID
    org_id: UUID
    user_id: UUID
    project_date: datetime
    note_count: int = 0
    ai_summary: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProjectDetail(ProjectRead):
    notes: List[NoteRead] = Field(default_factory=list)
