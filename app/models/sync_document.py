"""ORM model for the per-user versioned sync document."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from app.models.base import Base

# JSONB on PostgreSQL, generic JSON elsewhere (SQLite in tests).
JSONType = JSON().with_variant(JSONB(), "postgresql")

# Client-owned sections that a push may replace independently.
LIST_SECTIONS = ("contacts", "world_books", "user_persona_presets", "thought_presets")
SECTIONS = LIST_SECTIONS + ("my_profile",)

# Largest value the Integer version column can hold.
VERSION_MAX = 2**31 - 1


class SyncDocument(Base):
    """
    One document per user holding the client's opaque JSON sections.

    version starts at 0 and is incremented by exactly 1 in the same UPDATE
    that changes any section.
    """

    __tablename__ = "sync_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    contacts = Column(JSONType, nullable=False, default=lambda: [])
    world_books = Column(JSONType, nullable=False, default=lambda: [])
    user_persona_presets = Column(JSONType, nullable=False, default=lambda: [])
    thought_presets = Column(JSONType, nullable=False, default=lambda: [])
    my_profile = Column(JSONType, nullable=False, default=lambda: {})
    version = Column(Integer, nullable=False, default=0, server_default="0")
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    user = relationship("User", back_populates="sync_document")
