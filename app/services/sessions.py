"""
Session authority: issue and validate bearer tokens bound to a per-user session epoch.

Every token carries the user's session_epoch at issuance. Incrementing the
stored epoch (login, logout, password change, ban) makes every earlier token
unusable; there is no revocation list, so one account has at most one live
session at a time.
"""

import logging

import jwt
from sqlalchemy import update
from sqlalchemy.orm import Session

from app.core.exceptions import (
    AccountBanned,
    BadCredentials,
    InvalidToken,
    SessionSuperseded,
    TokenExpired,
    UserNotFound,
    ValidationError,
)
from app.core.security import create_access_token, decode_access_token, verify_password
from app.models import User
from app.models.user import STATUS_BANNED

logger = logging.getLogger(__name__)


def issue_token(user: User, epoch: int | None = None) -> str:
    """Sign a token for the given epoch (defaults to the user's stored session epoch)."""
    if epoch is None:
        epoch = user.session_epoch
    return create_access_token(sub=user.id, role=user.role, epoch=epoch)


def _claims(token: str) -> tuple[int, int]:
    try:
        payload = decode_access_token(token)
    except jwt.ExpiredSignatureError as e:
        raise TokenExpired() from e
    except jwt.PyJWTError as e:
        raise InvalidToken() from e
    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidToken("Invalid token payload") from e
    epoch = payload.get("epoch")
    # bool is an int subclass; reject it explicitly
    if not isinstance(epoch, int) or isinstance(epoch, bool):
        raise InvalidToken("Invalid token payload")
    return user_id, epoch


def validate_token(db: Session, token: str) -> User:
    """
    Return the user a token belongs to, or raise.

    Checks run in order: signature/shape (InvalidToken), expiry (TokenExpired),
    user exists (UserNotFound), not banned (AccountBanned), epoch matches the
    stored epoch (SessionSuperseded).
    """
    user_id, epoch = _claims(token)
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise UserNotFound()
    if user.status == STATUS_BANNED:
        raise AccountBanned()
    if user.session_epoch != epoch:
        raise SessionSuperseded()
    return user


def bump_epoch(db: Session, user_id: int, *criteria, **changes: object) -> int | None:
    """
    Atomically increment the user's session epoch and return the new value.

    Extra column changes (password_hash, status) are applied in the same
    UPDATE, which only touches the row when every extra criterion holds.
    Returns None when no row matched. Commits the current transaction.
    """
    new_epoch = db.execute(
        update(User)
        .where(User.id == user_id, *criteria)
        .values(session_epoch=User.session_epoch + 1, **changes)
        .returning(User.session_epoch)
    ).scalar_one_or_none()
    db.commit()
    if new_epoch is not None:
        logger.info("Session invalidated", extra={"user_id": user_id, "session_epoch": new_epoch})
    return new_epoch


def invalidate_session(db: Session, user_id: int, **changes: object) -> int:
    """Like bump_epoch, but raises UserNotFound when the user no longer exists."""
    new_epoch = bump_epoch(db, user_id, **changes)
    if new_epoch is None:
        raise UserNotFound()
    return new_epoch


def login(db: Session, username: str | None, password: str | None) -> tuple[str, User]:
    """
    Check credentials, supersede any earlier session and return (token, user).

    Signing in again, even from the same device, invalidates the previous token.
    """
    if not username or not password:
        raise ValidationError("Username and password are required")
    user = db.query(User).filter(User.username == username).first()
    if user is None:
        raise BadCredentials()
    if user.status == STATUS_BANNED:
        raise AccountBanned()
    if not verify_password(password, user.password_hash):
        raise BadCredentials()

    # The token carries the epoch returned by this UPDATE.
    epoch = invalidate_session(db, user.id)
    logger.info("User logged in", extra={"user_id": user.id, "session_epoch": epoch})
    return issue_token(user, epoch), user


def logout(db: Session, user: User) -> None:
    invalidate_session(db, user.id)
    logger.info("User logged out", extra={"user_id": user.id})
