"""Admin dashboard counters."""

from datetime import UTC, datetime

from sqlalchemy.orm import Session

from app.models import InviteCode, User
from app.models.user import STATUS_ACTIVE, STATUS_BANNED


def collect_stats(db: Session, now: datetime | None = None) -> dict[str, int]:
    """User and invite-code counts; today_registered counts users created since UTC midnight."""
    now = now or datetime.now(UTC)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return {
        "total_users": db.query(User).count(),
        "active_users": db.query(User).filter(User.status == STATUS_ACTIVE).count(),
        "banned_users": db.query(User).filter(User.status == STATUS_BANNED).count(),
        "total_codes": db.query(InviteCode).count(),
        "used_codes": db.query(InviteCode).filter(InviteCode.used.is_(True)).count(),
        "today_registered": db.query(User).filter(User.created_at >= today).count(),
    }
