"""Request/response schemas for the sync document endpoints."""

from typing import Any

from pydantic import Field, StrictInt

from app.schemas.base import CamelModel

SECTION_FIELDS = (
    "contacts",
    "world_books",
    "user_persona_presets",
    "thought_presets",
    "my_profile",
)


class SyncDocumentResponse(CamelModel):
    """Full document as stored, plus its version."""

    contacts: list[Any] = Field(default_factory=list)
    world_books: list[Any] = Field(default_factory=list)
    user_persona_presets: list[Any] = Field(default_factory=list)
    thought_presets: list[Any] = Field(default_factory=list)
    my_profile: dict[str, Any] = Field(default_factory=dict)
    version: int = 0


class SyncPushRequest(CamelModel):
    """
    Partial update of the sync document.

    Every section is optional; omitted (or null) sections keep their stored value.
    version is the version the client last read; it is required even though it
    is declared optional here, so a missing value maps to MISSING_VERSION (400)
    instead of a generic validation error.
    """

    contacts: list[Any] | None = None
    world_books: list[Any] | None = None
    user_persona_presets: list[Any] | None = None
    thought_presets: list[Any] | None = None
    my_profile: dict[str, Any] | None = None
    version: StrictInt | None = Field(default=None, description="Version the client last read")

    def section_updates(self) -> dict[str, Any]:
        """Sections present in the request, keyed by column name."""
        return {
            name: getattr(self, name)
            for name in SECTION_FIELDS
            if getattr(self, name) is not None
        }


class SyncPushResponse(CamelModel):
    version: int = Field(..., description="New version after the write")
    message: str = "Sync succeeded"
