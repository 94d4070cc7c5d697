"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.invite_code import InviteCode
from app.models.sync_document import SyncDocument
from app.models.user import User

__all__ = ["Base", "InviteCode", "SyncDocument", "User"]
