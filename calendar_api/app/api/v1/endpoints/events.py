"""
Event endpoints for API v1.

Events are created, listed and deleted through a calendar the caller
owns.  Reading a single event is open to any authenticated caller,
updating it is reserved to its organizer, and the day lookup returns
the caller's own events for one local calendar day.
"""

import re
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, status

from calendar_api.app.core.exceptions import ValidationError, server_error_guard
from calendar_api.app.core.security import get_current_user
from calendar_api.app.schemas.base import MessageResponse
from calendar_api.app.schemas.event import (
    EventCreate,
    EventDetail,
    EventEnvelope,
    EventRead,
    EventUpdate,
)
from calendar_api.app.services.event_service import EventService


router = APIRouter()

DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_day(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` path segment or raise ``ValidationError``."""
    if not DAY_RE.match(value):
        raise ValidationError("Invalid date format")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValidationError("Invalid date format") from exc


@router.post("/{calendar_id}/events", response_model=EventEnvelope, status_code=status.HTTP_201_CREATED)
async def create_event(
    calendar_id: int,
    body: EventCreate,
    current_user: dict = Depends(get_current_user),
) -> EventEnvelope:
    """Create an event in a calendar the caller owns.

    The caller becomes the organizer.  Nothing is stored when the
    calendar belongs to someone else (403).
    """
    with server_error_guard("event creation"):
        event = await EventService.create_event(calendar_id, body, current_user["id"])
    return EventEnvelope(message="Event created successfully", event=event)


@router.get("/{calendar_id}/events", response_model=List[EventRead])
async def list_calendar_events(
    calendar_id: int,
    current_user: dict = Depends(get_current_user),
) -> List[EventRead]:
    with server_error_guard("event retrieval"):
        return await EventService.list_calendar_events(calendar_id, current_user["id"])


@router.get("/events/day/{day}", response_model=List[EventDetail])
async def list_events_for_day(
    day: str,
    current_user: dict = Depends(get_current_user),
) -> List[EventDetail]:
    """Events organized by the caller that start on the given local day.

    Answers 404 when there are none.
    """
    parsed = parse_day(day)
    with server_error_guard("event retrieval"):
        return await EventService.events_for_day(parsed, current_user["id"])


@router.get("/events/{event_id}", response_model=EventDetail)
async def get_event(
    event_id: int,
    current_user: dict = Depends(get_current_user),
) -> EventDetail:
    """Fetch one event with organizer and attendees expanded."""
    with server_error_guard("event retrieval"):
        return await EventService.get_event(event_id)


@router.patch("/events/{event_id}", response_model=EventEnvelope)
async def update_event(
    event_id: int,
    body: EventUpdate,
    current_user: dict = Depends(get_current_user),
) -> EventEnvelope:
    """Partially update an event.  Only its organizer may do so."""
    updates = body.model_dump(exclude_unset=True)
    with server_error_guard("event update"):
        event = await EventService.update_event(event_id, current_user["id"], updates)
    return EventEnvelope(message="Event updated successfully", event=event)


@router.delete("/{calendar_id}/events/{event_id}", response_model=MessageResponse)
async def delete_event(
    calendar_id: int,
    event_id: int,
    current_user: dict = Depends(get_current_user),
) -> MessageResponse:
    with server_error_guard("event deletion"):
        await EventService.delete_event(calendar_id, event_id, current_user["id"])
    return MessageResponse(message="Event deleted successfully")
