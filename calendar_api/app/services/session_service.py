"""
Sessions and refresh token revocation.

Every login opens a row in ``sessions`` holding that login's refresh
token; a user may have several live sessions at once.  Logging out
appends the refresh token to the ``revoked_tokens`` log and flags the
session as revoked.  The auth gate consults both: the log by token and
the session flag through the ``sid`` claim, so access tokens of a
logged-out session stop working too.
"""

import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from ..core.config import settings
from ..core.db import get_cursor
from ..core.exceptions import PermissionDeniedError
from ..core.security import decode_refresh_token, issue_access_token, issue_refresh_token
from ..core.timeutils import utcnow_storage


logger = logging.getLogger(__name__)


@dataclass
class IssuedSession:
    session_id: int
    access_token: str
    refresh_token: str


def _refresh_expiry() -> str:
    expires = datetime.now(timezone.utc) + timedelta(minutes=settings.refresh_token_expire_minutes)
    return expires.isoformat(timespec="milliseconds")


class SessionService:
    """Service managing login sessions and the revocation log."""

    @staticmethod
    def start_session(cursor: sqlite3.Cursor, user: Any) -> IssuedSession:
        """Open a session for ``user`` on an existing transaction.

        The row is inserted first so its id can be embedded in both
        tokens, then updated with the refresh token.
        """
        cursor.execute(
            "INSERT INTO sessions (user_id, expires_at) VALUES (?, ?)",
            (user.id, _refresh_expiry()),
        )
        session_id = cursor.lastrowid
        access_token = issue_access_token(user, session_id)
        refresh_token = issue_refresh_token(user, session_id)
        cursor.execute(
            "UPDATE sessions SET refresh_token = ? WHERE id = ?",
            (refresh_token, session_id),
        )
        return IssuedSession(session_id, access_token, refresh_token)

    @classmethod
    async def open_session(cls, user: Any) -> IssuedSession:
        with get_cursor() as cursor:
            issued = cls.start_session(cursor, user)
        logger.info("Opened session %s for user %s", issued.session_id, user.id)
        return issued

    @classmethod
    async def refresh_access_token(cls, refresh_token: str) -> str:
        """Exchange a live refresh token for a new access token.

        The refresh token itself is left unchanged.  Raises
        ``PermissionDeniedError("Invalid refresh token")`` when the token
        was revoked, belongs to no live session, or fails verification.
        """
        with get_cursor() as cursor:
            revoked = cursor.execute(
                "SELECT 1 FROM revoked_tokens WHERE token = ?", (refresh_token,)
            ).fetchone()
            session = cursor.execute(
                "SELECT s.id, s.revoked, u.id AS user_id, u.email, u.name, u.role "
                "FROM sessions s JOIN users u ON u.id = s.user_id "
                "WHERE s.refresh_token = ?",
                (refresh_token,),
            ).fetchone()
        if revoked or session is None or session["revoked"]:
            raise PermissionDeniedError("Invalid refresh token")

        if decode_refresh_token(refresh_token) is None:
            raise PermissionDeniedError("Invalid refresh token")

        user = _SessionUser(
            id=session["user_id"],
            email=session["email"],
            name=session["name"],
            role=session["role"],
        )
        return issue_access_token(user, session["id"])

    @classmethod
    async def revoke(cls, refresh_token: str) -> None:
        """Record ``refresh_token`` as revoked and flag its session.

        Idempotent: revoking an already revoked or unknown token
        succeeds.  Expired entries of the revocation log are pruned on
        the way, since an expired token fails verification anyway.
        """
        now = utcnow_storage()
        with get_cursor() as cursor:
            session = cursor.execute(
                "SELECT id, expires_at FROM sessions WHERE refresh_token = ?",
                (refresh_token,),
            ).fetchone()
            expires_at = session["expires_at"] if session and session["expires_at"] else _refresh_expiry()
            cursor.execute(
                "INSERT OR IGNORE INTO revoked_tokens (token, expires_at) VALUES (?, ?)",
                (refresh_token, expires_at),
            )
            if session is not None:
                cursor.execute(
                    "UPDATE sessions SET revoked = 1, revoked_at = CURRENT_TIMESTAMP "
                    "WHERE id = ? AND revoked = 0",
                    (session["id"],),
                )
            cursor.execute("DELETE FROM revoked_tokens WHERE expires_at < ?", (now,))
        if session is not None:
            logger.info("Revoked session %s", session["id"])
        else:
            logger.info("Revoked refresh token with no matching session")

    @classmethod
    async def is_token_revoked(cls, token: str) -> bool:
        with get_cursor() as cursor:
            row = cursor.execute(
                "SELECT 1 FROM revoked_tokens WHERE token = ?", (token,)
            ).fetchone()
        return row is not None

    @classmethod
    async def is_session_revoked(cls, session_id: int) -> bool:
        """A session that no longer exists counts as revoked."""
        with get_cursor() as cursor:
            row = cursor.execute(
                "SELECT revoked FROM sessions WHERE id = ?", (session_id,)
            ).fetchone()
        return row is None or bool(row["revoked"])


@dataclass
class _SessionUser:
    id: int
    email: str
    name: Any
    role: str
