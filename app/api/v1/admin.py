"""Admin endpoints: dashboard stats, user management and invite codes. All require role 'admin'."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.v1.auth import AUTH_ERRORS, require_admin
from app.core.database import get_db
from app.models import InviteCode, User
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
from app.schemas.auth import MessageResponse
from app.schemas.errors import ErrorResponse
from app.services import credentials, invites
from app.services.pagination import total_pages
from app.services.stats import collect_stats

router = APIRouter(dependencies=[Depends(require_admin)], responses=AUTH_ERRORS)

NOT_FOUND = {404: {"model": ErrorResponse}}


def _user_item(user: User) -> UserListItem:
    return UserListItem(
        id=user.id,
        username=user.username,
        role=user.role,
        status=user.status,
        created_at=user.created_at,
        updated_at=user.updated_at,
        invite_code=user.invite_code.code if user.invite_code else None,
    )


def _code_item(code: InviteCode) -> InviteCodeItem:
    return InviteCodeItem(
        id=code.id,
        code=code.code,
        used=code.used,
        expires_at=code.expires_at,
        created_at=code.created_at,
        used_by=code.used_by.username if code.used_by else None,
    )


@router.get("/stats", response_model=StatsResponse)
def get_stats(db: Annotated[Session, Depends(get_db)]) -> StatsResponse:
    return StatsResponse(**collect_stats(db))


@router.get("/users", response_model=UsersListResponse)
def list_users(
    db: Annotated[Session, Depends(get_db)],
    page: Annotated[int, Query()] = 1,
    limit: Annotated[int, Query()] = 20,
    search: Annotated[str, Query()] = "",
) -> UsersListResponse:
    """Paginated users, newest first; search is a case-insensitive username substring."""
    users, total, page, limit = credentials.list_users(db, page, limit, search or None)
    return UsersListResponse(
        users=[_user_item(u) for u in users],
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages(total, limit),
    )


@router.patch("/users/{user_id}/ban", response_model=BanResponse, responses=NOT_FOUND)
def toggle_ban(
    user_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> BanResponse:
    """Ban or unban a user. Banning signs the user out immediately."""
    user = credentials.toggle_ban(db, user_id)
    return BanResponse(id=user.id, status=user.status)


@router.patch(
    "/users/{user_id}/reset-password",
    response_model=MessageResponse,
    responses={**NOT_FOUND, 400: {"model": ErrorResponse}},
)
def reset_password(
    user_id: int,
    body: ResetPasswordRequest,
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    credentials.reset_password(db, user_id, body.new_password)
    return MessageResponse(message="Password reset")


@router.delete("/users/{user_id}", response_model=MessageResponse, responses=NOT_FOUND)
def delete_user(
    user_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Delete a user and its sync document. Administrators cannot be deleted."""
    credentials.delete_user(db, user_id)
    return MessageResponse(message="User deleted")


@router.post("/invite-codes", response_model=InviteCodesResponse)
def create_invite_codes(
    body: InviteCodeCreateRequest,
    db: Annotated[Session, Depends(get_db)],
) -> InviteCodesResponse:
    codes = invites.generate_codes(db, body.count, body.expires_at)
    return InviteCodesResponse(codes=[_code_item(c) for c in codes])


@router.get("/invite-codes", response_model=InviteCodesListResponse)
def list_invite_codes(
    db: Annotated[Session, Depends(get_db)],
    page: Annotated[int, Query()] = 1,
    limit: Annotated[int, Query()] = 20,
) -> InviteCodesListResponse:
    codes, total, page, limit = invites.list_codes(db, page, limit)
    return InviteCodesListResponse(
        codes=[_code_item(c) for c in codes],
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages(total, limit),
    )


@router.delete("/invite-codes/{code_id}", response_model=MessageResponse, responses=NOT_FOUND)
def delete_invite_code(
    code_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    invites.delete_code(db, code_id)
    return MessageResponse(message="Invite code deleted")
