"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness plus database reachability, for load balancers and uptime checks."""

    status: Literal["ok", "degraded"] = Field(
        default="ok",
        description="'degraded' when the API is up but the database is unreachable",
    )
    environment: str = Field(description="Current app environment (dev or prod)")
    version: str = Field(description="API version string")
    database: Literal["connected", "disconnected"]
