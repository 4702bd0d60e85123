"""
Response bodies shared by every router.
"""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body of every error produced by the global exception handlers."""

    error: str
    message: str
    details: dict[str, Any] | None = None


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str


class DeleteResponse(BaseModel):
    """Confirmation returned by delete endpoints."""

    success: bool = True
    message: str
