"""ORM model for application users (auth, RBAC and single-session epoch)."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from app.models.base import Base

ROLE_USER = "user"
ROLE_ADMIN = "admin"
STATUS_ACTIVE = "active"
STATUS_BANNED = "banned"


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role: 'admin' or 'user'; status: 'active' or 'banned'.
    session_epoch is embedded in every issued token and only ever incremented;
    a token whose epoch differs from the stored value is no longer accepted.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(20), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=ROLE_USER, server_default=ROLE_USER)
    status = Column(String(32), nullable=False, default=STATUS_ACTIVE, server_default=STATUS_ACTIVE)
    session_epoch = Column(Integer, nullable=False, default=0, server_default="0")
    invite_code_id = Column(
        Integer,
        ForeignKey("invite_codes.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    invite_code = relationship("InviteCode", back_populates="used_by")
    sync_document = relationship(
        "SyncDocument",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
