"""
Top-level router for version 1 of the API.

This router aggregates the three route groups (auth, calendar, event).
When new domains are introduced, update this file to include their
routers.
"""

from fastapi import APIRouter

from .endpoints import auth, calendars, events

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(calendars.router, prefix="/calendar", tags=["calendar"])
router.include_router(events.router, prefix="/event", tags=["event"])
