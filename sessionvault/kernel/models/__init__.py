"""
Kernel Data Models

Core SQLAlchemy models: users, the refresh token ledger and the audit trail.
"""

from sessionvault.kernel.models.base import Base, TimestampMixin
from sessionvault.kernel.models.user import User, UserRole, RefreshToken
from sessionvault.kernel.models.event_log import AuthEvent, EventType

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # User
    "User",
    "UserRole",
    "RefreshToken",
    # Audit
    "AuthEvent",
    "EventType",
]
