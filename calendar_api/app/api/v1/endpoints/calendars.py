"""
Calendar endpoints for API v1.

All routes act on the caller's own calendars only.  Renaming or
deleting a calendar owned by someone else answers 404, the same as a
calendar that does not exist.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from calendar_api.app.core.exceptions import server_error_guard
from calendar_api.app.core.security import get_current_user
from calendar_api.app.schemas.base import MessageResponse
from calendar_api.app.schemas.calendar import (
    CalendarCreate,
    CalendarEnvelope,
    CalendarRead,
    CalendarUpdate,
)
from calendar_api.app.services.calendar_service import CalendarService


router = APIRouter()


@router.post("", response_model=CalendarEnvelope, status_code=status.HTTP_201_CREATED)
async def create_calendar(
    body: CalendarCreate,
    current_user: dict = Depends(get_current_user),
) -> CalendarEnvelope:
    """Create a calendar owned by the caller."""
    with server_error_guard("calendar creation"):
        calendar = await CalendarService.create_calendar(body.name, current_user["id"])
    return CalendarEnvelope(message="Calendar created successfully", calendar=calendar)


@router.get("", response_model=List[CalendarRead])
async def list_calendars(current_user: dict = Depends(get_current_user)) -> List[CalendarRead]:
    with server_error_guard("calendar retrieval"):
        return await CalendarService.list_calendars(current_user["id"])


@router.put("/{calendar_id}", response_model=CalendarEnvelope)
async def update_calendar(
    calendar_id: int,
    body: CalendarUpdate,
    current_user: dict = Depends(get_current_user),
) -> CalendarEnvelope:
    """Rename a calendar."""
    with server_error_guard("calendar update"):
        calendar = await CalendarService.update_calendar(calendar_id, current_user["id"], body.name)
    return CalendarEnvelope(message="Calendar updated", calendar=calendar)


@router.delete("/{calendar_id}", response_model=MessageResponse)
async def delete_calendar(
    calendar_id: int,
    current_user: dict = Depends(get_current_user),
) -> MessageResponse:
    """Delete a calendar.  Its events are kept but no longer linked to it."""
    with server_error_guard("calendar deletion"):
        await CalendarService.delete_calendar(calendar_id, current_user["id"])
    return MessageResponse(message="Calendar deleted successfully")
