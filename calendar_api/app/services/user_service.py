"""
Business logic for identities.

``UserService`` registers and authenticates users and serves the user
listing/search endpoints.  Registration opens the first session in the
same transaction as the identity insert, so a successful registration
always leaves the caller with a usable token pair.
"""

import logging
import sqlite3
from typing import Iterable, List, Optional, Set

from ..core.db import get_cursor
from ..core.exceptions import NotFoundError, ValidationError
from ..core.security import hash_password, verify_password
from ..core.timeutils import from_sqlite_timestamp
from ..core.validation import validate_user_credentials
from ..schemas.auth import RegisterRequest
from ..schemas.user import UserPage, UserRecord, UserRole, UserSummary
from .session_service import IssuedSession, SessionService


logger = logging.getLogger(__name__)

USER_COLUMNS = "id, email, password, name, role, created_at, updated_at"


def _row_to_user(row: sqlite3.Row) -> UserRecord:
    return UserRecord(
        id=row["id"],
        email=row["email"],
        password=row["password"],
        name=row["name"],
        role=row["role"],
        created_at=from_sqlite_timestamp(row["created_at"]),
        updated_at=from_sqlite_timestamp(row["updated_at"]),
    )


class UserService:
    """Service for registered identities."""

    @classmethod
    async def register(cls, data: RegisterRequest) -> IssuedSession:
        """Create an identity and open its first session.

        The duplicate-email check runs before the credential rules, so an
        existing email is reported as such whatever the password looks
        like.  Raises ``ValidationError`` for either failure.
        """
        if await cls.get_user_by_email(data.email) is not None:
            raise ValidationError("User already registered")

        violation = validate_user_credentials(data.email, data.password)
        if violation:
            raise ValidationError(violation)

        hashed = hash_password(data.password)
        try:
            with get_cursor() as cursor:
                cursor.execute(
                    "INSERT INTO users (email, password, name, role) VALUES (?, ?, ?, ?)",
                    (data.email, hashed, data.name, UserRole.USER.value),
                )
                user_id = cursor.lastrowid
                row = cursor.execute(
                    f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)
                ).fetchone()
                user = _row_to_user(row)
                issued = SessionService.start_session(cursor, user)
        except sqlite3.IntegrityError as exc:
            # Lost a race with a concurrent registration of the same email.
            raise ValidationError("User already registered") from exc

        logger.info("Registered user %s (id=%s)", data.email, user_id)
        return issued

    @classmethod
    async def authenticate(cls, email: str, password: str) -> UserRecord:
        """Return the identity for ``email`` if ``password`` matches.

        Unknown email and wrong password raise ``ValidationError`` with two
        different messages.
        """
        user = await cls.get_user_by_email(email)
        if user is None:
            raise ValidationError("Invalid credentials, user not found")
        if not verify_password(password, user.password):
            raise ValidationError("Invalid credentials, incorrect password")
        return user

    @classmethod
    async def get_user_by_email(cls, email: str) -> Optional[UserRecord]:
        with get_cursor() as cursor:
            row = cursor.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE email = ?", (email,)
            ).fetchone()
        return _row_to_user(row) if row else None

    @classmethod
    async def find_user_by_email(cls, email: str) -> UserSummary:
        """Lookup for the search endpoint; raises ``NotFoundError``."""
        user = await cls.get_user_by_email(email)
        if user is None:
            raise NotFoundError("User not found")
        return UserSummary(id=user.id, email=user.email, name=user.name, role=user.role)

    @classmethod
    async def list_users(cls, page: int = 1, limit: int = 10) -> UserPage:
        """Return one page of identities ordered by id, without password hashes."""
        offset = (page - 1) * limit
        with get_cursor() as cursor:
            total = cursor.execute("SELECT COUNT(*) AS count FROM users").fetchone()["count"]
            rows = cursor.execute(
                "SELECT id, email, name, role FROM users ORDER BY id LIMIT ? OFFSET ?",
                (limit, offset),
            ).fetchall()
        users = [
            UserSummary(id=row["id"], email=row["email"], name=row["name"], role=row["role"])
            for row in rows
        ]
        return UserPage(page=page, limit=limit, total=total, users=users)


def missing_user_ids(cursor: sqlite3.Cursor, user_ids: Iterable[int]) -> Set[int]:
    """Return the subset of ``user_ids`` with no matching identity."""
    wanted = set(user_ids)
    if not wanted:
        return set()
    placeholders = ", ".join("?" for _ in wanted)
    rows = cursor.execute(
        f"SELECT id FROM users WHERE id IN ({placeholders})", tuple(wanted)
    ).fetchall()
    return wanted - {row["id"] for row in rows}


def user_summaries(cursor: sqlite3.Cursor, user_ids: Iterable[int]) -> List[UserSummary]:
    """Fetch summaries for ``user_ids``, keeping the given order."""
    ids = list(dict.fromkeys(user_ids))
    if not ids:
        return []
    placeholders = ", ".join("?" for _ in ids)
    rows = cursor.execute(
        f"SELECT id, email, name, role FROM users WHERE id IN ({placeholders})", tuple(ids)
    ).fetchall()
    by_id = {
        row["id"]: UserSummary(id=row["id"], email=row["email"], name=row["name"], role=row["role"])
        for row in rows
    }
    return [by_id[user_id] for user_id in ids if user_id in by_id]
