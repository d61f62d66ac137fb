"""
Refresh token ledger.

Durable record of every refresh token handed out and whether it has been
revoked. Atomicity comes from the database: inserts are conditional on the
token's unique key and revocation is a conditional update, so concurrent
requests never need an application lock.
"""

from enum import Enum
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from sessionvault.kernel.models.user import RefreshToken

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class RecordOutcome(str, Enum):
    RECORDED = "recorded"
    ALREADY_RECORDED = "already_recorded"
    REVOKED_CONFLICT = "revoked_conflict"


class RevokeOutcome(str, Enum):
    REVOKED_NOW = "revoked_now"
    ALREADY_UNAUTHORIZED = "already_unauthorized"


class RefreshTokenLedger:
    """
    Ledger operations over the ``refresh_tokens`` table.

    The ledger flushes through the caller's session but never commits; the
    session flow that uses it owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def _insert(self):
        dialect = self.session.get_bind().dialect.name
        try:
            return _INSERT_BY_DIALECT[dialect]
        except KeyError:
            raise RuntimeError(f"Unsupported database dialect for ledger: {dialect}") from None

    async def record(self, token: str, subject_id: int) -> RecordOutcome:
        """
        Insert a non-revoked entry unless one already exists for this token.

        Returns:
            RECORDED for a new row, ALREADY_RECORDED when a live row exists,
            REVOKED_CONFLICT when the token string was revoked before
        """
        stmt = (
            self._insert()(RefreshToken)
            .values(token=token, user_id=subject_id, is_revoked=False)
            .on_conflict_do_nothing(index_elements=[RefreshToken.token])
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 1:
            return RecordOutcome.RECORDED

        existing = await self.session.execute(
            select(RefreshToken.is_revoked).where(RefreshToken.token == token)
        )
        if existing.scalar_one():
            return RecordOutcome.REVOKED_CONFLICT
        return RecordOutcome.ALREADY_RECORDED

    async def is_revoked(self, token: str) -> bool:
        """
        Whether the token has been revoked.

        A token with no record counts as not revoked: its record may not be
        committed yet by a concurrent issuance.
        """
        result = await self.session.execute(
            select(RefreshToken.is_revoked).where(RefreshToken.token == token)
        )
        revoked = result.scalar_one_or_none()
        return bool(revoked)

    async def revoke(self, token: str) -> RevokeOutcome:
        """
        Mark a live token revoked.

        Returns:
            REVOKED_NOW if this call revoked it, ALREADY_UNAUTHORIZED if the
            token is unknown or was already revoked
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.token == token, RefreshToken.is_revoked == False)
            .values(is_revoked=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 1:
            return RevokeOutcome.REVOKED_NOW
        return RevokeOutcome.ALREADY_UNAUTHORIZED

    async def owner_of(self, token: str) -> Optional[int]:
        """Subject id a recorded token belongs to, if any."""
        result = await self.session.execute(
            select(RefreshToken.user_id).where(RefreshToken.token == token)
        )
        return result.scalar_one_or_none()

    async def count_active(self, subject_id: int) -> int:
        """Number of non-revoked refresh tokens held by a subject."""
        result = await self.session.execute(
            select(func.count())
            .select_from(RefreshToken)
            .where(RefreshToken.user_id == subject_id, RefreshToken.is_revoked == False)
        )
        return result.scalar_one()
