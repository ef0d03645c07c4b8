from enum import Enum


class Role(str, Enum):
    """Closed set of organization roles. Invites never grant ADMIN on acceptance."""

    ADMIN = "admin"
    MEMBER = "member"


class InviteStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"


class NoteType(str, Enum):
    TEXT = "text"
    PHOTO = "photo"
    VIDEO = "video"
