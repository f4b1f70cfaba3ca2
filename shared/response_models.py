"""
Envelope models shared by every router.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body returned for every EasyDeckError."""

    success: bool = Field(default=False, description="Always false for errors")
    message: str = Field(..., description="User-facing error message")
    error: str | None = Field(None, description="Error class name")
    error_code: str | None = Field(None, description="Stable code the UI branches on")
    upstream_status: int | None = Field(
        None, description="HTTP status returned by Google, for Slides API failures"
    )
    timestamp: str | None = Field(None, description="Error timestamp")


class HealthResponse(BaseModel):
    status: str = Field(..., description="healthy or degraded")
    message: str
    version: str | None = None
    dependencies: dict[str, str] = Field(
        default_factory=dict, description="Reachability of the database and Google endpoints"
    )
