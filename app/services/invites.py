"""Invite code generation, listing and deletion (admin)."""

import logging
import secrets
from datetime import UTC, datetime

from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import NotFound
from app.models import InviteCode
from app.services.credentials import as_utc
from app.services.pagination import normalize_paging

logger = logging.getLogger(__name__)

MAX_CODES_PER_REQUEST = 100
# 4 random bytes -> 8 upper-case hex characters
CODE_BYTES = 4


def new_code() -> str:
    return secrets.token_hex(CODE_BYTES).upper()


def generate_codes(
    db: Session, count: int | None = 1, expires_at: datetime | None = None
) -> list[InviteCode]:
    """Create between 1 and MAX_CODES_PER_REQUEST unused codes sharing one optional expiry."""
    count = min(MAX_CODES_PER_REQUEST, max(1, count or 1))
    if expires_at is not None:
        expires_at = as_utc(expires_at).astimezone(UTC)
    values: set[str] = set()
    while len(values) < count:
        values.add(new_code())
    codes = [InviteCode(code=value, expires_at=expires_at) for value in sorted(values)]
    db.add_all(codes)
    db.commit()
    for code in codes:
        db.refresh(code)
    logger.info("Invite codes generated", extra={"count": len(codes)})
    return codes


def list_codes(
    db: Session, page: int | None = None, limit: int | None = None
) -> tuple[list[InviteCode], int, int, int]:
    """Newest-first page of codes with the consuming user loaded. Returns (codes, total, page, limit)."""
    page, limit = normalize_paging(page, limit)
    total = db.query(InviteCode).count()
    codes = (
        db.query(InviteCode)
        .options(joinedload(InviteCode.used_by))
        .order_by(InviteCode.created_at.desc(), InviteCode.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return codes, total, page, limit


def delete_code(db: Session, code_id: int) -> None:
    """Delete a code; a user that consumed it keeps its account but loses the back-reference."""
    code = db.query(InviteCode).filter(InviteCode.id == code_id).first()
    if code is None:
        raise NotFound("Invite code not found")
    db.delete(code)
    db.commit()
    logger.info("Invite code deleted", extra={"invite_code_id": code_id})
