"""
Common schema types used across the API.
"""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Body of every error response and of message-only successes."""

    message: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
