"""Pydantic request/response schemas."""

from app.schemas.admin import (
    BanResponse,
    InviteCodeCreateRequest,
    InviteCodeItem,
    InviteCodesListResponse,
    InviteCodesResponse,
    ResetPasswordRequest,
    StatsResponse,
    UserListItem,
    UsersListResponse,
)
from app.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    CurrentUser,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserPublic,
)
from app.schemas.errors import ConflictResponse, ErrorResponse
from app.schemas.health import HealthResponse
from app.schemas.sync import SyncDocumentResponse, SyncPushRequest, SyncPushResponse

__all__ = [
    "AuthResponse",
    "BanResponse",
    "ChangePasswordRequest",
    "ConflictResponse",
    "CurrentUser",
    "ErrorResponse",
    "HealthResponse",
    "InviteCodeCreateRequest",
    "InviteCodeItem",
    "InviteCodesListResponse",
    "InviteCodesResponse",
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "ResetPasswordRequest",
    "StatsResponse",
    "SyncDocumentResponse",
    "SyncPushRequest",
    "SyncPushResponse",
    "UserListItem",
    "UsersListResponse",
]
