"""Registration, login/logout, password change and auth dependencies (get_current_user, require_admin)."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.exceptions import AdminRequired, NotAuthenticated
from app.models import User
from app.models.user import ROLE_ADMIN
from app.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    CurrentUser,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserPublic,
)
from app.schemas.errors import ErrorResponse
from app.services import credentials, sessions

router = APIRouter()
security = HTTPBearer(auto_error=False)

AUTH_ERRORS = {401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}}


def get_authenticated_user(
    bearer: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """
    Dependency: require a valid Bearer JWT for the user's live session.

    401 for a missing, malformed, expired or superseded token (code
    SESSION_SUPERSEDED when the account signed in elsewhere); 403 when banned.
    """
    if bearer is None or not bearer.credentials:
        raise NotAuthenticated()
    return sessions.validate_token(db, bearer.credentials)


def get_current_user(
    user: Annotated[User, Depends(get_authenticated_user)],
) -> CurrentUser:
    """Dependency: the authenticated user as a schema."""
    return CurrentUser(
        id=user.id,
        username=user.username,
        role=user.role,
        created_at=user.created_at,
    )


def require_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: require authenticated user with role 'admin'. Raises 403 for non-admin."""
    if current_user.role != ROLE_ADMIN:
        raise AdminRequired()
    return current_user


def _auth_response(token: str, user: User) -> AuthResponse:
    return AuthResponse(
        token=token,
        user=UserPublic(id=user.id, username=user.username, role=user.role),
    )


@router.post("/register", response_model=AuthResponse, responses={400: {"model": ErrorResponse}})
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    """Create an account by consuming a one-time invite code; returns a token for the new session."""
    user = credentials.register(db, body.username, body.password, body.invite_code)
    return _auth_response(sessions.issue_token(user), user)


@router.post("/login", response_model=AuthResponse, responses=AUTH_ERRORS)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    """
    Authenticate with username and password; returns a JWT access token.
    Any token issued earlier for this account stops working.
    """
    token, user = sessions.login(db, body.username, body.password)
    return _auth_response(token, user)


@router.post("/logout", response_model=MessageResponse, responses=AUTH_ERRORS)
def logout(
    user: Annotated[User, Depends(get_authenticated_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    sessions.logout(db, user)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=CurrentUser, responses=AUTH_ERRORS)
def me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    return current_user


@router.post("/change-password", response_model=MessageResponse, responses=AUTH_ERRORS)
def change_password(
    body: ChangePasswordRequest,
    user: Annotated[User, Depends(get_authenticated_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Change the password; the current token is invalidated and the client must log in again."""
    credentials.change_password(db, user, body.old_password, body.new_password)
    return MessageResponse(message="Password changed, please log in again")
