"""
Pydantic models for the auth route group.

Refresh and logout bodies declare ``refresh_token`` optional so the
endpoints can answer a missing token with their own message instead
of a generic validation error.
"""

from typing import Optional

from pydantic import Field

from .base import ApiModel


class RegisterRequest(ApiModel):
    email: str = Field(..., examples=["jane@example.com"])
    password: str = Field(..., examples=["Str0ng!Pass"])
    name: Optional[str] = Field(None, examples=["Jane Doe"])


class LoginRequest(ApiModel):
    email: str = Field(..., examples=["jane@example.com"])
    password: str = Field(..., examples=["Str0ng!Pass"])


class RefreshTokenRequest(ApiModel):
    refresh_token: Optional[str] = None


class TokenPairResponse(ApiModel):
    message: str
    access_token: str
    refresh_token: str


class AccessTokenResponse(ApiModel):
    access_token: str
