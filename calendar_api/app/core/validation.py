"""
Credential validation for registration.

``validate_user_credentials`` checks the email format and the password
strength rules in a fixed order and reports only the first rule that
fails.
"""

import re
from typing import Optional


EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8
UPPERCASE_RE = re.compile(r"[A-Z]")
LOWERCASE_RE = re.compile(r"[a-z]")
DIGIT_RE = re.compile(r"\d")
SPECIAL_CHAR_RE = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")


def validate_user_credentials(email: str, password: str) -> Optional[str]:
    """Return ``None`` if the credentials are acceptable, else the violation message.

    Rules are checked in order: email pattern, minimum length, uppercase,
    lowercase, digit, special character.  The first failure wins.
    """
    if not EMAIL_RE.match(email or ""):
        return "Invalid email format"

    password = password or ""
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
    if not UPPERCASE_RE.search(password):
        return "Password must contain at least one uppercase letter"
    if not LOWERCASE_RE.search(password):
        return "Password must contain at least one lowercase letter"
    if not DIGIT_RE.search(password):
        return "Password must contain at least one digit"
    if not SPECIAL_CHAR_RE.search(password):
        return "Password must contain at least one special character"

    return None
