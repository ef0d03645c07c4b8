from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .common import NoteType


class NoteCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    project_id: UUID = Field(alias="projectId")
    type: NoteType
    content: Optional[str] = None
    transcription: Optional[str] = None
    image_label: Optional[str] = Field(default=None, alias="imageLabel")
    sub_area: Optional[str] = Field(default=None, alias="subArea")
    file_key: Optional[str] = Field(default=None, alias="fileKey")


class NoteLabelUpdate(BaseModel):
    label: Optional[str] = None


class NoteUpdate(BaseModel):
    """Partial update; at least one field must be present."""

    model_config = ConfigDict(populate_by_name=True)

    image_label: Optional[str] = Field(default=None, alias="imageLabel")
    content: Optional[str] = None
    sub_area: Optional[str] = Field(default=None, alias="subArea")
    transcription: Optional[str] = None


class NoteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    org_id: UUID
    type: NoteType
    content: Optional[str] = None
    transcription: Optional[str] = None
    image_label: Optional[str] = None
    sub_area: Optional[str] = None
    file_key: Optional[str] = None
    created_by: Optional[UUID] = None
    created_at: datetime


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------

class SummaryUpsert(BaseModel):
    content: str = Field(min_length=1)


class SummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    content: str
    updated_at: datetime


# ---------------------------------------------------------------------------
# Shares
# ---------------------------------------------------------------------------

class ShareCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    expires_at: Optional[datetime] = Field(default=None, alias="expiresAt")


class ShareLinkResponse(BaseModel):
    url: str


class SharedNoteRead(BaseModel):
    """What an anonymous visitor sees behind a share link."""

    model_config = ConfigDict(populate_by_name=True)

    type: NoteType
    caption: str = ""
    file_key: Optional[str] = Field(default=None, alias="fileKey")
    project_name: str = Field(alias="projectName")
    created_at: datetime = Field(alias="createdAt")
