"""
Auth endpoints for API v1.

Registration, login, access token refresh and logout, plus the
authenticated user listing and search.  Register and login both open a
new session; earlier sessions of the same user stay valid until they
are logged out.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from calendar_api.app.core.exceptions import AuthenticationError, ValidationError, server_error_guard
from calendar_api.app.core.security import get_current_user
from calendar_api.app.schemas.auth import (
    AccessTokenResponse,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    TokenPairResponse,
)
from calendar_api.app.schemas.base import MessageResponse
from calendar_api.app.schemas.user import UserPage, UserSummary
from calendar_api.app.services.session_service import SessionService
from calendar_api.app.services.user_service import UserService


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=TokenPairResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest) -> TokenPairResponse:
    """Register a new identity and return an access/refresh token pair.

    Fails with 400 if the email is taken (checked first) or if the
    credentials break a validation rule.
    """
    with server_error_guard("registration"):
        issued = await UserService.register(body)
    return TokenPairResponse(
        message="Registration successful",
        access_token=issued.access_token,
        refresh_token=issued.refresh_token,
    )


@router.post("/login", response_model=TokenPairResponse)
async def login(body: LoginRequest) -> TokenPairResponse:
    """Authenticate with email and password and open a new session."""
    with server_error_guard("login"):
        user = await UserService.authenticate(body.email, body.password)
        issued = await SessionService.open_session(user)
    logger.info("User %s logged in", user.id)
    return TokenPairResponse(
        message="Login successful",
        access_token=issued.access_token,
        refresh_token=issued.refresh_token,
    )


@router.post("/refresh-token", response_model=AccessTokenResponse)
async def refresh_token(body: Optional[RefreshTokenRequest] = None) -> AccessTokenResponse:
    """Exchange a refresh token for a new access token.

    The refresh token itself is not rotated and stays valid.
    """
    if body is None or not body.refresh_token:
        raise AuthenticationError("Refresh token required")
    with server_error_guard("token refresh"):
        access_token = await SessionService.refresh_access_token(body.refresh_token)
    return AccessTokenResponse(access_token=access_token)


@router.post("/logout", response_model=MessageResponse)
async def logout(body: Optional[RefreshTokenRequest] = None) -> MessageResponse:
    """Revoke the session the refresh token belongs to."""
    if body is None or not body.refresh_token:
        raise ValidationError("Refresh token required")
    with server_error_guard("logout"):
        await SessionService.revoke(body.refresh_token)
    return MessageResponse(message="Logout successful")


@router.get("/users", response_model=UserPage)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
) -> UserPage:
    """Page through registered identities, without password hashes."""
    with server_error_guard("user retrieval"):
        return await UserService.list_users(page=page, limit=limit)


@router.get("/users/search", response_model=UserSummary)
async def search_user(
    email: str = Query(..., min_length=1),
    current_user: dict = Depends(get_current_user),
) -> UserSummary:
    with server_error_guard("user search"):
        return await UserService.find_user_by_email(email)
