"""
Business logic for events.

An event is created through a calendar the caller owns and is linked
to it by a row in ``calendar_events``; the event itself does not know
its calendar.  Writes that touch both the event and the link (create,
delete) run in a single transaction.

Access rules differ per operation:

* create, list and delete require ownership of the calendar;
* update requires being the event's organizer;
* get-by-id is open to any authenticated caller;
* the day lookup only returns events the caller organizes.
"""

import logging
import sqlite3
from datetime import date
from typing import Any, Dict, List, Optional

from ..core.db import get_cursor
from ..core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from ..core.timeutils import (
    from_sqlite_timestamp,
    from_storage,
    local_day_bounds,
    to_local_aware,
    to_storage,
)
from ..schemas.event import EventCreate, EventDetail, EventRead
from .user_service import missing_user_ids, user_summaries


logger = logging.getLogger(__name__)

EVENT_COLUMNS = (
    "id, title, description, start_time, end_time, location, organizer_id, created_at, updated_at"
)

# Request field -> column.  Attendees are stored separately.
UPDATABLE_COLUMNS = {
    "title": "title",
    "description": "description",
    "start_time": "start_time",
    "end_time": "end_time",
    "location": "location",
}
NON_NULLABLE_FIELDS = {"title", "start_time", "end_time"}


def _require_calendar_owner(cursor: sqlite3.Cursor, calendar_id: int, user_id: int) -> None:
    row = cursor.execute(
        "SELECT owner_id FROM calendars WHERE id = ?", (calendar_id,)
    ).fetchone()
    if row is None or row["owner_id"] != user_id:
        raise PermissionDeniedError("Access denied, you don't own this calendar")


def _check_attendees(cursor: sqlite3.Cursor, attendees: List[int]) -> None:
    missing = missing_user_ids(cursor, attendees)
    if missing:
        raise ValidationError(
            "Unknown attendee", error=f"No user with id {', '.join(str(i) for i in sorted(missing))}"
        )


def _set_attendees(cursor: sqlite3.Cursor, event_id: int, attendees: List[int]) -> None:
    cursor.execute("DELETE FROM event_attendees WHERE event_id = ?", (event_id,))
    cursor.executemany(
        "INSERT INTO event_attendees (event_id, user_id) VALUES (?, ?)",
        [(event_id, user_id) for user_id in dict.fromkeys(attendees)],
    )


def _attendee_ids(cursor: sqlite3.Cursor, event_ids: List[int]) -> Dict[int, List[int]]:
    result: Dict[int, List[int]] = {event_id: [] for event_id in event_ids}
    if not event_ids:
        return result
    placeholders = ", ".join("?" for _ in event_ids)
    rows = cursor.execute(
        f"SELECT event_id, user_id FROM event_attendees "
        f"WHERE event_id IN ({placeholders}) ORDER BY rowid",
        tuple(event_ids),
    ).fetchall()
    for row in rows:
        result[row["event_id"]].append(row["user_id"])
    return result


def _event_fields(row: sqlite3.Row) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "title": row["title"],
        "description": row["description"],
        "start_time": from_storage(row["start_time"]),
        "end_time": from_storage(row["end_time"]),
        "location": row["location"],
        "created_at": from_sqlite_timestamp(row["created_at"]),
        "updated_at": from_sqlite_timestamp(row["updated_at"]),
    }


def _to_reads(cursor: sqlite3.Cursor, rows: List[sqlite3.Row]) -> List[EventRead]:
    attendees = _attendee_ids(cursor, [row["id"] for row in rows])
    return [
        EventRead(organizer=row["organizer_id"], attendees=attendees[row["id"]], **_event_fields(row))
        for row in rows
    ]


def _to_details(cursor: sqlite3.Cursor, rows: List[sqlite3.Row]) -> List[EventDetail]:
    attendees = _attendee_ids(cursor, [row["id"] for row in rows])
    details = []
    for row in rows:
        organizer = user_summaries(cursor, [row["organizer_id"]])
        details.append(
            EventDetail(
                organizer=organizer[0],
                attendees=user_summaries(cursor, attendees[row["id"]]),
                **_event_fields(row),
            )
        )
    return details


def _fetch_event_row(cursor: sqlite3.Cursor, event_id: int) -> Optional[sqlite3.Row]:
    return cursor.execute(
        f"SELECT {EVENT_COLUMNS} FROM events WHERE id = ?", (event_id,)
    ).fetchone()


class EventService:
    """Service for events and their calendar links."""

    @classmethod
    async def create_event(cls, calendar_id: int, data: EventCreate, user_id: int) -> EventRead:
        """Create an event organized by ``user_id`` and append it to the calendar."""
        with get_cursor() as cursor:
            _require_calendar_owner(cursor, calendar_id, user_id)
            _check_attendees(cursor, data.attendees)
            cursor.execute(
                """
                INSERT INTO events (title, description, start_time, end_time, location, organizer_id)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    data.title,
                    data.description,
                    to_storage(data.start_time),
                    to_storage(data.end_time),
                    data.location,
                    user_id,
                ),
            )
            event_id = cursor.lastrowid
            _set_attendees(cursor, event_id, data.attendees)
            # Position is computed in the same statement so concurrent
            # appends cannot read the same maximum.
            cursor.execute(
                """
                INSERT INTO calendar_events (calendar_id, event_id, position)
                SELECT ?, ?, COALESCE(MAX(position), -1) + 1
                FROM calendar_events WHERE calendar_id = ?
                """,
                (calendar_id, event_id, calendar_id),
            )
            cursor.execute(
                "UPDATE calendars SET updated_at = CURRENT_TIMESTAMP WHERE id = ?", (calendar_id,)
            )
            event = _to_reads(cursor, [_fetch_event_row(cursor, event_id)])[0]
        logger.info("User %s created event %s in calendar %s", user_id, event_id, calendar_id)
        return event

    @classmethod
    async def list_calendar_events(cls, calendar_id: int, user_id: int) -> List[EventRead]:
        """Return the calendar's events in list order."""
        with get_cursor() as cursor:
            _require_calendar_owner(cursor, calendar_id, user_id)
            rows = cursor.execute(
                """
                SELECT e.id, e.title, e.description, e.start_time, e.end_time, e.location,
                       e.organizer_id, e.created_at, e.updated_at
                FROM calendar_events ce JOIN events e ON e.id = ce.event_id
                WHERE ce.calendar_id = ?
                ORDER BY ce.position
                """,
                (calendar_id,),
            ).fetchall()
            return _to_reads(cursor, rows)

    @classmethod
    async def get_event(cls, event_id: int) -> EventDetail:
        """Return one event with organizer and attendees expanded."""
        with get_cursor() as cursor:
            row = _fetch_event_row(cursor, event_id)
            if row is None:
                raise NotFoundError("Event not found")
            return _to_details(cursor, [row])[0]

    @classmethod
    async def update_event(cls, event_id: int, user_id: int, updates: Dict[str, Any]) -> EventRead:
        """Apply a partial update; only the organizer may do this.

        ``updates`` holds only fields present in the request body.  The
        time range is checked against the merged record.
        """
        for field in NON_NULLABLE_FIELDS:
            if field in updates and updates[field] is None:
                raise ValidationError("Validation error", error=f"{field} cannot be null")

        with get_cursor() as cursor:
            row = _fetch_event_row(cursor, event_id)
            if row is None:
                raise NotFoundError("Event not found")
            if row["organizer_id"] != user_id:
                raise PermissionDeniedError("Access denied, only the organizer can update this event")

            start_time = updates.get("start_time") or from_storage(row["start_time"])
            end_time = updates.get("end_time") or from_storage(row["end_time"])
            if to_local_aware(end_time) < to_local_aware(start_time):
                raise ValidationError("Validation error", error="endTime must not be before startTime")

            assignments = []
            values: List[Any] = []
            for field, column in UPDATABLE_COLUMNS.items():
                if field not in updates:
                    continue
                value = updates[field]
                if field in ("start_time", "end_time"):
                    value = to_storage(value)
                assignments.append(f"{column} = ?")
                values.append(value)
            assignments.append("updated_at = CURRENT_TIMESTAMP")
            values.append(event_id)
            cursor.execute(f"UPDATE events SET {', '.join(assignments)} WHERE id = ?", tuple(values))

            if updates.get("attendees") is not None:
                _check_attendees(cursor, updates["attendees"])
                _set_attendees(cursor, event_id, updates["attendees"])

            event = _to_reads(cursor, [_fetch_event_row(cursor, event_id)])[0]
        logger.info("User %s updated event %s", user_id, event_id)
        return event

    @classmethod
    async def delete_event(cls, calendar_id: int, event_id: int, user_id: int) -> None:
        """Delete an event listed in a calendar the caller owns.

        An event that is not in the calendar's list is reported as not
        found and left untouched.
        """
        with get_cursor() as cursor:
            _require_calendar_owner(cursor, calendar_id, user_id)
            link = cursor.execute(
                "SELECT 1 FROM calendar_events WHERE calendar_id = ? AND event_id = ?",
                (calendar_id, event_id),
            ).fetchone()
            if link is None:
                raise NotFoundError("Event not found")
            # Cascades remove the calendar link and attendee rows.
            cursor.execute("DELETE FROM events WHERE id = ?", (event_id,))
            cursor.execute(
                "UPDATE calendars SET updated_at = CURRENT_TIMESTAMP WHERE id = ?", (calendar_id,)
            )
        logger.info("User %s deleted event %s from calendar %s", user_id, event_id, calendar_id)

    @classmethod
    async def events_for_day(cls, day: date, user_id: int) -> List[EventDetail]:
        """Events organized by ``user_id`` starting within the local ``day``."""
        start_of_day, end_of_day = local_day_bounds(day)
        with get_cursor() as cursor:
            rows = cursor.execute(
                f"""
                SELECT {EVENT_COLUMNS} FROM events
                WHERE organizer_id = ? AND start_time >= ? AND start_time < ?
                ORDER BY start_time, id
                """,
                (user_id, start_of_day, end_of_day),
            ).fetchall()
            if not rows:
                raise NotFoundError("No events found for the specified date")
            return _to_details(cursor, rows)
