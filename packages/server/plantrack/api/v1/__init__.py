"""
API Router

Organization and invite routes need only a signed-in user; project and note
routes are additionally confined to the caller's primary organization.
"""

from fastapi import APIRouter
from . import invites, notes, organizations, projects

router = APIRouter()

router.include_router(organizations.router, prefix="/organizations", tags=["Organizations"])
router.include_router(invites.router, prefix="/invites", tags=["Invites"])

# Org-scoped resource routers
router.include_router(projects.router, prefix="/projects", tags=["Projects"])
router.include_router(notes.router, prefix="/notes", tags=["Notes"])

# Public share view
router.include_router(notes.public_router, tags=["Share"])
