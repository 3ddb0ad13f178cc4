"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["ok", "degraded"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (e.g. dev, prod)")
    version: str = Field(description="API version")
    database: Literal["connected", "disconnected"] = Field(
        description="Credential store connectivity",
    )
