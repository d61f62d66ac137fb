"""
Event Store service for the append-only authentication audit trail.

Events are added to the caller's session and committed together with the
state change they describe.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from sessionvault.kernel.models.event_log import AuthEvent, EventType
from sessionvault.logging_config import redact


class EventStore:
    """
    Service for appending to and reading the audit trail.

    Usage:
        event_store = EventStore(session)
        await event_store.log(
            event_type=EventType.USER_LOGGED_IN,
            user_id=user.id,
            payload={"identifier": user.username},
        )
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log(
        self,
        event_type: EventType,
        user_id: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AuthEvent:
        """
        Append an event to the audit trail.

        Args:
            event_type: The type of event
            user_id: Subject the event concerns
            payload: Additional event data; credential fields are masked
            ip_address: Client IP address
            user_agent: Client user agent

        Returns:
            The pending AuthEvent record
        """
        event = AuthEvent(
            event_type=event_type.value,
            user_id=user_id,
            payload={key: redact(key, value) for key, value in (payload or {}).items()},
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self.session.add(event)
        # Caller commits
        return event

    async def get_user_history(
        self,
        user_id: int,
        limit: int = 100,
    ) -> List[AuthEvent]:
        """Most recent events for a subject, newest first."""
        query = (
            select(AuthEvent)
            .where(AuthEvent.user_id == user_id)
            .order_by(desc(AuthEvent.created_at), desc(AuthEvent.id))
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
