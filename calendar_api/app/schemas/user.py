"""
Pydantic models for identities.

``UserId`` is the single identity reference type; calendars use it for
their owner and events for their organizer and attendees.  Password
hashes never leave the service layer: the API only ever returns a
``UserSummary``.
"""

from datetime import datetime
from enum import Enum
from typing import List, NewType, Optional

from pydantic import Field

from .base import ApiModel


UserId = NewType("UserId", int)


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class UserSummary(ApiModel):
    """Public view of an identity."""

    id: UserId
    email: str = Field(..., examples=["jane@example.com"])
    name: Optional[str] = Field(None, examples=["Jane Doe"])
    role: UserRole = UserRole.USER


class UserRecord(UserSummary):
    """Identity as stored, including the password hash.  Internal only."""

    password: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserPage(ApiModel):
    page: int
    limit: int
    total: int
    users: List[UserSummary]
