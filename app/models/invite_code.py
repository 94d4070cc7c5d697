"""ORM model for one-time registration invite codes."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, false, func
from sqlalchemy.orm import relationship

from app.models.base import Base


class InviteCode(Base):
    """Invite code; used flips false -> true exactly once, together with user creation."""

    __tablename__ = "invite_codes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(32), nullable=False, unique=True, index=True)
    used = Column(Boolean, nullable=False, default=False, server_default=false())
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    used_by = relationship("User", back_populates="invite_code", uselist=False)
