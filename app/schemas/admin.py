"""Request/response schemas for the admin endpoints."""

from datetime import datetime

from pydantic import Field

from app.schemas.base import CamelModel


class StatsResponse(CamelModel):
    """Dashboard counters."""

    total_users: int
    active_users: int
    banned_users: int
    total_codes: int
    used_codes: int
    today_registered: int


class UserListItem(CamelModel):
    """User entry for admin list (no password)."""

    id: int
    username: str
    role: str
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    invite_code: str | None = None


class UsersListResponse(CamelModel):
    users: list[UserListItem]
    total: int
    page: int
    limit: int
    total_pages: int


class BanResponse(CamelModel):
    id: int
    status: str


class ResetPasswordRequest(CamelModel):
    new_password: str | None = None


class InviteCodeCreateRequest(CamelModel):
    count: int = Field(default=1, description="Number of codes to generate (clamped to 1-100)")
    expires_at: datetime | None = Field(default=None, description="Optional expiry for every generated code")


class InviteCodeItem(CamelModel):
    id: int
    code: str
    used: bool
    expires_at: datetime | None = None
    created_at: datetime | None = None
    used_by: str | None = Field(default=None, description="Username that consumed the code")


class InviteCodesResponse(CamelModel):
    codes: list[InviteCodeItem]


class InviteCodesListResponse(CamelModel):
    codes: list[InviteCodeItem]
    total: int
    page: int
    limit: int
    total_pages: int
