"""Error response bodies (documented on routes via responses=)."""

from pydantic import Field

from app.schemas.base import CamelModel


class ErrorResponse(CamelModel):
    error: str = Field(..., description="Human-readable message")
    code: str = Field(..., description="Machine-readable code, e.g. SESSION_SUPERSEDED")


class ConflictResponse(ErrorResponse):
    server_version: int = Field(..., description="Current server-side version to re-fetch against")
