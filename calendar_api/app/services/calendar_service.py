"""
Business logic for calendars.

Every operation is scoped to the requesting identity: a calendar that
exists but belongs to someone else is reported exactly like a missing
one (``NotFoundError``).
"""

import logging
import sqlite3
from typing import Dict, List

from ..core.db import get_cursor
from ..core.exceptions import NotFoundError
from ..core.timeutils import from_sqlite_timestamp
from ..schemas.calendar import CalendarRead


logger = logging.getLogger(__name__)


def calendar_event_ids(cursor: sqlite3.Cursor, calendar_ids: List[int]) -> Dict[int, List[int]]:
    """Map each calendar id to its event ids in list order."""
    result: Dict[int, List[int]] = {calendar_id: [] for calendar_id in calendar_ids}
    if not calendar_ids:
        return result
    placeholders = ", ".join("?" for _ in calendar_ids)
    rows = cursor.execute(
        f"SELECT calendar_id, event_id FROM calendar_events "
        f"WHERE calendar_id IN ({placeholders}) ORDER BY calendar_id, position",
        tuple(calendar_ids),
    ).fetchall()
    for row in rows:
        result[row["calendar_id"]].append(row["event_id"])
    return result


def _row_to_calendar(row: sqlite3.Row, event_ids: List[int]) -> CalendarRead:
    return CalendarRead(
        id=row["id"],
        name=row["name"],
        owner=row["owner_id"],
        events=event_ids,
        created_at=from_sqlite_timestamp(row["created_at"]),
        updated_at=from_sqlite_timestamp(row["updated_at"]),
    )


def _fetch_calendar(cursor: sqlite3.Cursor, calendar_id: int) -> CalendarRead:
    row = cursor.execute(
        "SELECT id, name, owner_id, created_at, updated_at FROM calendars WHERE id = ?",
        (calendar_id,),
    ).fetchone()
    return _row_to_calendar(row, calendar_event_ids(cursor, [calendar_id])[calendar_id])


class CalendarService:
    """Ownership-scoped CRUD for calendars."""

    @classmethod
    async def create_calendar(cls, name: str, owner_id: int) -> CalendarRead:
        with get_cursor() as cursor:
            cursor.execute(
                "INSERT INTO calendars (name, owner_id) VALUES (?, ?)", (name, owner_id)
            )
            calendar = _fetch_calendar(cursor, cursor.lastrowid)
        logger.info("User %s created calendar %s", owner_id, calendar.id)
        return calendar

    @classmethod
    async def list_calendars(cls, owner_id: int) -> List[CalendarRead]:
        """Return the calendars owned by ``owner_id``, oldest first."""
        with get_cursor() as cursor:
            rows = cursor.execute(
                "SELECT id, name, owner_id, created_at, updated_at FROM calendars "
                "WHERE owner_id = ? ORDER BY id",
                (owner_id,),
            ).fetchall()
            event_ids = calendar_event_ids(cursor, [row["id"] for row in rows])
        return [_row_to_calendar(row, event_ids[row["id"]]) for row in rows]

    @classmethod
    async def update_calendar(cls, calendar_id: int, owner_id: int, name: str) -> CalendarRead:
        """Rename a calendar the caller owns."""
        with get_cursor() as cursor:
            cursor.execute(
                "UPDATE calendars SET name = ?, updated_at = CURRENT_TIMESTAMP "
                "WHERE id = ? AND owner_id = ?",
                (name, calendar_id, owner_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError("Calendar not found")
            return _fetch_calendar(cursor, calendar_id)

    @classmethod
    async def delete_calendar(cls, calendar_id: int, owner_id: int) -> None:
        """Delete a calendar the caller owns.

        Links to its events are removed by cascade; the event records
        themselves are kept.
        """
        with get_cursor() as cursor:
            cursor.execute(
                "DELETE FROM calendars WHERE id = ? AND owner_id = ?",
                (calendar_id, owner_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError("Calendar not found")
        logger.info("User %s deleted calendar %s", owner_id, calendar_id)
