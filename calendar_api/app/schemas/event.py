"""
Pydantic models for event data.

``EventCreate`` is the request body for creating an event;
``EventUpdate`` lists the only fields a PATCH may touch and rejects
anything else.  ``EventRead`` references identities by id while
``EventDetail`` expands organizer and attendees to user summaries.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field, model_validator

from ..core.timeutils import to_local_aware
from .base import ApiModel, NonEmptyTrimmedStr, TrimmedStr
from .user import UserId, UserSummary


class EventBase(ApiModel):
    title: NonEmptyTrimmedStr = Field(..., examples=["Standup"])
    description: Optional[TrimmedStr] = Field(None, examples=["Daily team sync"])
    start_time: datetime = Field(..., examples=["2023-10-23T09:00:00Z"])
    end_time: datetime = Field(..., examples=["2023-10-23T09:15:00Z"])
    location: Optional[TrimmedStr] = Field(None, examples=["Room 4"])


class EventCreate(EventBase):
    """Schema for creating an event.  The organizer is always the caller."""

    attendees: List[UserId] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_time_range(self) -> "EventCreate":
        if to_local_aware(self.end_time) < to_local_aware(self.start_time):
            raise ValueError("endTime must not be before startTime")
        return self


class EventUpdate(ApiModel):
    """Schema for updating an event.

    All fields are optional; only fields present in the request body are
    applied.  Unknown fields are rejected.
    """

    model_config = ConfigDict(extra="forbid")

    title: Optional[NonEmptyTrimmedStr] = None
    description: Optional[TrimmedStr] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[TrimmedStr] = None
    attendees: Optional[List[UserId]] = None


class EventRead(EventBase):
    """Schema for reading an event from the API."""

    id: int
    organizer: UserId
    attendees: List[UserId] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EventDetail(EventBase):
    """Event with organizer and attendees expanded."""

    id: int
    organizer: UserSummary
    attendees: List[UserSummary] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EventEnvelope(ApiModel):
    message: str
    event: EventRead
