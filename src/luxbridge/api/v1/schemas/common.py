# Common API response schemas.
# Created: 2026-10-12

from __future__ import annotations

from pydantic import BaseModel


class APIResponse(BaseModel):
    """Base response wrapper."""

    model_config = {"from_attributes": True}


class ErrorResponse(APIResponse):
    """Error body returned by every endpoint."""

    error: str
    message: str | None = None


class SuccessResponse(APIResponse):
    success: bool = True
