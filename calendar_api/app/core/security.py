"""
Security helpers for password hashing and JWT authentication.

This module implements a lightweight JSON Web Token (JWT) mechanism
using HMAC-SHA256 signatures and base64url encoding.  Two kinds of
token are issued from an identity record:

* access tokens, signed with ``settings.jwt_secret`` and valid for
  ``settings.access_token_expire_minutes``;
* refresh tokens, signed with ``settings.jwt_refresh_secret`` and
  valid for ``settings.refresh_token_expire_minutes``.

Both embed the identity claims ``email``, ``id``, ``name`` and
``role`` plus the id of the session (``sid``) they belong to.  Expiry
is enforced by ``decode_token``, not at issuance.

Passwords are hashed with PBKDF2-HMAC-SHA256 and a per-password salt.

``get_current_user`` is the FastAPI dependency guarding every
protected route.
"""

import base64
import hashlib
import hmac
import json
import logging
import os
import secrets
import time
from typing import Any, Dict, Mapping, Optional

from fastapi import Depends
from fastapi.security import APIKeyHeader

from .config import settings
from .exceptions import AuthenticationError, PermissionDeniedError


logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 100_000


def _b64_url_encode(data: bytes) -> str:
    """Base64-url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64-url encoded string, adding padding if necessary."""
    padding = '=' * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    """Compute HMAC-SHA256 signature of a message using the given secret."""
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def encode_token(claims: Mapping[str, Any], secret: str, expires_in: int) -> str:
    """Create a signed JWT carrying ``claims`` and an ``exp`` timestamp.

    Parameters
    ----------
    claims : Mapping
        Claims to embed in the token.
    secret : str
        HMAC secret used for the signature.
    expires_in : int
        Lifetime of the token in seconds.

    Returns
    -------
    str
        A token of the form ``header.payload.signature``.
    """
    now = int(time.time())
    to_encode = dict(claims)
    to_encode["iat"] = now
    to_encode["exp"] = now + expires_in
    header = {"alg": settings.algorithm, "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(',', ':')).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(to_encode, separators=(',', ':')).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, secret))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def decode_token(token: str, secret: str) -> Optional[Dict[str, Any]]:
    """Verify and decode a JWT token.

    Verifies the HMAC signature with constant-time comparison and
    checks the ``exp`` field.  Returns the payload dictionary if the
    token is valid, otherwise ``None``.
    """
    parts = token.split('.')
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    try:
        actual_sig = _b64_url_decode(signature_b64)
        expected_sig = _sign(signing_input, secret)
        if not hmac.compare_digest(expected_sig, actual_sig):
            return None
        data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
        if not isinstance(data, dict) or data.get("exp") is None:
            return None
        if int(data["exp"]) < int(time.time()):
            return None
    except (TypeError, ValueError):
        # binascii.Error, JSONDecodeError and UnicodeDecodeError are ValueErrors
        return None
    return data


def identity_claims(user: Any) -> Dict[str, Any]:
    """Claims describing an identity; ``user`` is any object with the usual fields."""
    return {
        "email": user.email,
        "id": user.id,
        "name": user.name,
        "role": user.role,
    }


def issue_access_token(user: Any, session_id: Optional[int] = None) -> str:
    """Create a short-lived access token for ``user``."""
    claims = identity_claims(user)
    if session_id is not None:
        claims["sid"] = session_id
    return encode_token(claims, settings.jwt_secret, settings.access_token_expire_minutes * 60)


def issue_refresh_token(user: Any, session_id: Optional[int] = None) -> str:
    """Create a long-lived refresh token for ``user``.

    A random ``jti`` makes every refresh token unique, even two issued
    for the same user within the same second.
    """
    claims = identity_claims(user)
    if session_id is not None:
        claims["sid"] = session_id
    claims["jti"] = secrets.token_hex(8)
    return encode_token(claims, settings.jwt_refresh_secret, settings.refresh_token_expire_minutes * 60)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    return decode_token(token, settings.jwt_secret)


def decode_refresh_token(token: str) -> Optional[Dict[str, Any]]:
    return decode_token(token, settings.jwt_refresh_secret)


# ---------------------------------------------------------------------------
# Auth gate
# ---------------------------------------------------------------------------

# The Authorization header value is used as-is; a "Bearer " prefix is
# tolerated but not required.
authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


def extract_token(header_value: Optional[str]) -> Optional[str]:
    if not header_value:
        return None
    token = header_value.strip()
    if token[:7].lower() == "bearer ":
        token = token[7:].strip()
    return token or None


async def get_current_user(authorization: Optional[str] = Depends(authorization_header)) -> Dict[str, Any]:
    """Dependency that returns the decoded claims of the caller's access token.

    Rejects the request with 403 when no token is supplied or the token
    (or its session) has been revoked, and with 401 when the signature
    or expiry check fails.
    """
    from calendar_api.app.services.session_service import SessionService

    token = extract_token(authorization)
    if token is None:
        raise PermissionDeniedError("No token provided")

    if await SessionService.is_token_revoked(token):
        logger.warning("Rejected revoked token")
        raise PermissionDeniedError("Token has been revoked")

    payload = decode_access_token(token)
    if not payload:
        logger.warning("Rejected invalid or expired token")
        raise AuthenticationError("Invalid token")

    session_id = payload.get("sid")
    if session_id is not None and await SessionService.is_session_revoked(session_id):
        logger.warning("Rejected token of revoked session %s", session_id)
        raise PermissionDeniedError("Token has been revoked")

    return payload


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    """Hash a password using PBKDF2-HMAC with SHA-256.

    A 16-byte random salt is generated for each password.  The result
    is ``"<salt hex>$<hash hex>"``.
    """
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), salt, PBKDF2_ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a stored salt+hash string.

    Returns ``False`` for a malformed stored value rather than raising.
    """
    try:
        salt_hex, hash_hex = hashed_password.split('$', 1)
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except (AttributeError, ValueError):
        return False
    dk = hashlib.pbkdf2_hmac('sha256', plain_password.encode('utf-8'), salt, PBKDF2_ITERATIONS)
    return hmac.compare_digest(dk, stored_hash)
