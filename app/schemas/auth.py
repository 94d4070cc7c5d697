"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import Field

from app.schemas.base import CamelModel


class RegisterRequest(CamelModel):
    """Invite-code registration. Lengths are checked by the credential store so the first failing rule wins."""

    username: str | None = Field(default=None, description="Username (2-20 characters)")
    password: str | None = Field(default=None, description="Password (at least 6 characters)")
    invite_code: str | None = Field(default=None, description="One-time invite code")


class LoginRequest(CamelModel):
    """Credentials for login."""

    username: str | None = Field(default=None, description="Username")
    password: str | None = Field(default=None, description="Password")


class ChangePasswordRequest(CamelModel):
    old_password: str | None = None
    new_password: str | None = None


class UserPublic(CamelModel):
    """User fields safe to return to the account owner."""

    id: int
    username: str
    role: str


class AuthResponse(CamelModel):
    """Bearer token plus the signed-in user. Send as Authorization: Bearer <token>."""

    token: str = Field(..., description="JWT access token")
    user: UserPublic


class CurrentUser(CamelModel):
    """Authenticated user (id, username, role) for dependency injection."""

    id: int
    username: str
    role: str
    created_at: datetime | None = None


class MessageResponse(CamelModel):
    message: str
