from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error body for locally rejected requests (4xx) and unexpected failures (500)."""
    error: str = Field(..., description="Short error message")
    details: Optional[Any] = Field(default=None, description="Optional extra details")


class StatusResponse(BaseModel):
    """Static liveness payload returned by GET on the gateway endpoint."""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Service version")
    message: str = Field(..., description="Human-readable status message")
