"""
API Router.

Aggregates all endpoint routers mounted under the API prefix.
"""

from fastapi import APIRouter

from notes_app.api.routes import notes

router = APIRouter()

# Notes endpoints
router.include_router(notes.router, prefix="/note", tags=["notes"])
