"""
Versioned sync document store with optimistic concurrency.

Each user owns exactly one document. A write names the version it was based
on; the store applies it only if that is still the stored version, and bumps
the version in the same UPDATE. No locks are held between a client's read and
its write, and there is no merge: the first writer for a given version wins,
later writers get VersionConflict with the current version and must re-read.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import insert, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import MissingVersion, ValidationError, VersionConflict
from app.models import SyncDocument
from app.models.sync_document import LIST_SECTIONS, SECTIONS, VERSION_MAX

logger = logging.getLogger(__name__)


@dataclass
class SyncSnapshot:
    """Document sections and the version they belong to."""

    contacts: list[Any] = field(default_factory=list)
    world_books: list[Any] = field(default_factory=list)
    user_persona_presets: list[Any] = field(default_factory=list)
    thought_presets: list[Any] = field(default_factory=list)
    my_profile: dict[str, Any] = field(default_factory=dict)
    version: int = 0


def read_document(db: Session, user_id: int) -> SyncSnapshot:
    """Return the user's document, or an empty document at version 0 if none exists."""
    doc = db.query(SyncDocument).filter(SyncDocument.user_id == user_id).first()
    if doc is None:
        logger.warning("Sync document missing; returning empty default", extra={"user_id": user_id})
        return SyncSnapshot()
    return SyncSnapshot(
        contacts=doc.contacts,
        world_books=doc.world_books,
        user_persona_presets=doc.user_persona_presets,
        thought_presets=doc.thought_presets,
        my_profile=doc.my_profile,
        version=doc.version,
    )


def _check_sections(sections: dict[str, Any]) -> None:
    unknown = set(sections) - set(SECTIONS)
    if unknown:
        raise ValidationError(f"Unknown sync sections: {', '.join(sorted(unknown))}")
    for name in LIST_SECTIONS:
        if name in sections and not isinstance(sections[name], list):
            raise ValidationError(f"{name} must be a list")
    if "my_profile" in sections and not isinstance(sections["my_profile"], dict):
        raise ValidationError("my_profile must be an object")


def _conditional_update(
    db: Session, user_id: int, sections: dict[str, Any], expected_version: int
) -> int:
    """Apply sections and bump version iff the stored version equals expected_version. Returns rows matched."""
    return db.execute(
        update(SyncDocument)
        .where(
            SyncDocument.user_id == user_id,
            SyncDocument.version == expected_version,
        )
        .values(version=SyncDocument.version + 1, **sections)
        .execution_options(synchronize_session=False)
    ).rowcount


def _current_version(db: Session, user_id: int) -> int | None:
    return (
        db.query(SyncDocument.version)
        .filter(SyncDocument.user_id == user_id)
        .scalar()
    )


def _create_missing_document(db: Session, user_id: int) -> None:
    """Insert an empty document; a concurrent insert for the same user is tolerated."""
    try:
        db.execute(insert(SyncDocument).values(user_id=user_id))
    except IntegrityError:
        db.rollback()
        logger.info("Sync document created concurrently", extra={"user_id": user_id})


def _conflict(db: Session, user_id: int, expected_version: int, current: int | None) -> VersionConflict:
    db.rollback()
    logger.info(
        "Sync conflict",
        extra={
            "user_id": user_id,
            "expected_version": expected_version,
            "server_version": current or 0,
        },
    )
    return VersionConflict(server_version=current or 0)


def write_document(
    db: Session,
    user_id: int,
    sections: dict[str, Any],
    expected_version: int | None,
) -> int:
    """
    Compare-and-swap write; returns the new version.

    sections holds only the sections to replace; the others stay as stored.
    An empty sections dict is still a write and still bumps the version.
    Raises MissingVersion when expected_version is None and VersionConflict
    (carrying the current server version) when the document has moved on.
    """
    if expected_version is None:
        raise MissingVersion()
    _check_sections(sections)

    # No stored version lies outside the column range; skip the UPDATE.
    if not 0 <= expected_version <= VERSION_MAX:
        raise _conflict(db, user_id, expected_version, _current_version(db, user_id))

    matched = _conditional_update(db, user_id, sections, expected_version)
    if matched == 0:
        current = _current_version(db, user_id)
        if current is None:
            # Users normally get their document at registration.
            _create_missing_document(db, user_id)
            matched = _conditional_update(db, user_id, sections, expected_version)
            current = _current_version(db, user_id)
        if matched == 0:
            raise _conflict(db, user_id, expected_version, current)

    db.commit()
    new_version = expected_version + 1
    logger.info(
        "Sync document written",
        extra={
            "user_id": user_id,
            "version": new_version,
            "sections": sorted(sections),
        },
    )
    return new_version
