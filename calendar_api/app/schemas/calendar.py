"""Pydantic models for calendars."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .base import ApiModel, NonEmptyTrimmedStr
from .user import UserId


class CalendarCreate(ApiModel):
    name: NonEmptyTrimmedStr = Field(..., examples=["Work"])


class CalendarUpdate(ApiModel):
    name: NonEmptyTrimmedStr = Field(..., examples=["Personal"])


class CalendarRead(ApiModel):
    """A calendar with its ordered list of event ids."""

    id: int
    name: str
    owner: UserId
    events: List[int] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CalendarEnvelope(ApiModel):
    message: str
    calendar: CalendarRead
