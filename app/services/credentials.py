"""Credential store: invite-code registration, user lookups and account administration."""

import logging
from datetime import UTC, datetime

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import (
    BadCredentials,
    ForbiddenOperation,
    InvalidInviteCode,
    InviteCodeExpired,
    InviteCodeUsed,
    NotFound,
    UsernameTaken,
    ValidationError,
)
from app.core.security import (
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    hash_password,
    verify_password,
)
from app.models import InviteCode, SyncDocument, User
from app.models.user import ROLE_ADMIN, STATUS_ACTIVE, STATUS_BANNED
from app.services.pagination import normalize_paging
from app.services.sessions import bump_epoch, invalidate_session

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps (SQLite returns them) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _validate_new_password(password: str | None, label: str = "Password") -> str:
    if not password:
        raise ValidationError(f"{label} is required")
    # No upper bound; hash_password truncates to bcrypt's 72 bytes.
    if len(password) < PASSWORD_MIN_LEN:
        raise ValidationError(f"{label} must be at least {PASSWORD_MIN_LEN} characters")
    return password


def _validate_registration(
    username: str | None, password: str | None, invite_code: str | None
) -> None:
    if not username or not password or not invite_code:
        raise ValidationError("Username, password and invite code are required")
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        raise ValidationError(
            f"Username must be {USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} characters"
        )
    _validate_new_password(password)


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def _require_user(db: Session, user_id: int) -> User:
    user = get_user_by_id(db, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def register(
    db: Session,
    username: str | None,
    password: str | None,
    invite_code: str | None,
) -> User:
    """
    Create a user by consuming one invite code.

    Checks run in order and the first failure wins: field presence and lengths,
    code exists, code unused, code unexpired, username free. The code is
    claimed with a conditional UPDATE (used = false -> true) in the same
    transaction that inserts the user and its empty sync document, so a code
    can authorize at most one account and a failure leaves nothing behind.
    """
    _validate_registration(username, password, invite_code)

    code = db.query(InviteCode).filter(InviteCode.code == invite_code).first()
    if code is None:
        raise InvalidInviteCode()
    if code.used:
        raise InviteCodeUsed()
    if code.expires_at is not None and as_utc(code.expires_at) < datetime.now(UTC):
        raise InviteCodeExpired()
    if get_user_by_username(db, username) is not None:
        raise UsernameTaken()

    password_hash = hash_password(password)
    try:
        claimed = db.execute(
            update(InviteCode)
            .where(InviteCode.id == code.id, InviteCode.used.is_(False))
            .values(used=True)
            .execution_options(synchronize_session=False)
        ).rowcount
        if claimed == 0:
            raise InviteCodeUsed()
        user = User(
            username=username,
            password_hash=password_hash,
            invite_code_id=code.id,
        )
        user.sync_document = SyncDocument()
        db.add(user)
        db.commit()
    except InviteCodeUsed:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        raise UsernameTaken() from e

    db.refresh(user)
    logger.info(
        "User registered",
        extra={"user_id": user.id, "invite_code_id": code.id},
    )
    return user


def change_password(
    db: Session, user: User, old_password: str | None, new_password: str | None
) -> None:
    """Replace the password after checking the old one; ends the current session."""
    if not old_password or not new_password:
        raise ValidationError("Old and new password are required")
    _validate_new_password(new_password, label="New password")
    if not verify_password(old_password, user.password_hash):
        raise BadCredentials("Old password is incorrect")
    invalidate_session(db, user.id, password_hash=hash_password(new_password))
    logger.info("Password changed", extra={"user_id": user.id})


def reset_password(db: Session, user_id: int, new_password: str | None) -> None:
    """Admin password reset; ends the user's current session."""
    _validate_new_password(new_password, label="New password")
    user = _require_user(db, user_id)
    invalidate_session(db, user.id, password_hash=hash_password(new_password))
    logger.info("Password reset by admin", extra={"user_id": user.id})


def toggle_ban(db: Session, user_id: int) -> User:
    """
    Flip a user between active and banned.

    Banning also bumps the session epoch so outstanding tokens stop working at
    once; unbanning does not issue or restore any session. Each UPDATE only
    applies while the status is still the one read here, so a concurrent
    toggle of the same user is not applied twice.
    """
    user = _require_user(db, user_id)
    if user.role == ROLE_ADMIN:
        raise ForbiddenOperation("Administrators cannot be banned")

    if user.status == STATUS_BANNED:
        matched = db.execute(
            update(User)
            .where(User.id == user.id, User.status == STATUS_BANNED)
            .values(status=STATUS_ACTIVE)
            .execution_options(synchronize_session=False)
        ).rowcount
        db.commit()
    else:
        matched = bump_epoch(
            db, user.id, User.status == STATUS_ACTIVE, status=STATUS_BANNED
        ) is not None
    if not matched:
        logger.info("Ban status changed concurrently; left as is", extra={"user_id": user.id})
    db.refresh(user)
    logger.info("Ban toggled", extra={"user_id": user.id, "status": user.status})
    return user


def delete_user(db: Session, user_id: int) -> None:
    """Delete a non-admin user together with its sync document."""
    user = _require_user(db, user_id)
    if user.role == ROLE_ADMIN:
        raise ForbiddenOperation("Administrators cannot be deleted")
    db.delete(user)
    db.commit()
    logger.info("User deleted", extra={"user_id": user_id})


def list_users(
    db: Session,
    page: int | None = None,
    limit: int | None = None,
    search: str | None = None,
) -> tuple[list[User], int, int, int]:
    """
    Newest-first page of users, optionally filtered by a case-insensitive
    username substring. Returns (users, total, page, limit).
    """
    page, limit = normalize_paging(page, limit)
    query = db.query(User)
    if search:
        query = query.filter(User.username.icontains(search, autoescape=True))
    total = query.count()
    users = (
        query.options(joinedload(User.invite_code))
        .order_by(User.created_at.desc(), User.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return users, total, page, limit


def create_user(db: Session, username: str, password: str, role: str) -> User:
    """Create a user without an invite code (admin bootstrap and CLI)."""
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        raise ValidationError(
            f"Username must be {USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} characters"
        )
    _validate_new_password(password)
    if get_user_by_username(db, username) is not None:
        raise UsernameTaken()
    user = User(username=username, password_hash=hash_password(password), role=role)
    user.sync_document = SyncDocument()
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise UsernameTaken() from e
    db.refresh(user)
    return user


def ensure_admin(db: Session, username: str, password: str) -> bool:
    """Create the configured administrator if it does not exist. Returns True when created."""
    if get_user_by_username(db, username) is not None:
        return False
    create_user(db, username, password, role=ROLE_ADMIN)
    logger.info("Admin account created", extra={"username": username})
    return True
