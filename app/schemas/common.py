"""Shared response bodies."""

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Acknowledgement for operations that return no resource."""

    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Body of every error raised by the access control core."""

    detail: str = Field(description="Human-readable reason")
    error: str = Field(description="Error class, e.g. Forbidden or InvalidToken")
