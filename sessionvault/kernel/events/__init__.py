"""
Audit trail infrastructure.
"""

from sessionvault.kernel.events.event_store import EventStore

__all__ = ["EventStore"]
