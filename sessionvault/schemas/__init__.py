"""
Pydantic schemas for API request/response validation.
"""

from sessionvault.schemas.common import HealthResponse, MessageResponse
from sessionvault.schemas.auth import UserCreate, UserLogin, UserResponse

__all__ = [
    "HealthResponse",
    "MessageResponse",
    "UserCreate",
    "UserLogin",
    "UserResponse",
]
