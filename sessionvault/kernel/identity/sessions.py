"""
Session lifecycle: issuing token pairs, renewing access tokens and logging out.

Each flow works inside the request's database session and commits its own
ledger writes before any token leaves the service.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sessionvault.config import Settings
from sessionvault.errors import UNAUTHORIZED, AuthenticationError, InternalError
from sessionvault.kernel.events.event_store import EventStore
from sessionvault.kernel.identity.ledger import (
    RecordOutcome,
    RefreshTokenLedger,
    RevokeOutcome,
)
from sessionvault.kernel.identity.tokens import TokenCodec
from sessionvault.kernel.models.event_log import EventType
from sessionvault.kernel.models.user import User
from sessionvault.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class IssuedSession:
    """A freshly recorded token pair and the user it belongs to."""

    user: User
    access_token: str
    refresh_token: str


class SessionIssuer:
    """Turns a successful login or registration into a token pair."""

    def __init__(
        self,
        session: AsyncSession,
        settings: Settings,
        codec: TokenCodec,
        ledger: Optional[RefreshTokenLedger] = None,
        event_store: Optional[EventStore] = None,
    ):
        self.session = session
        self.settings = settings
        self.codec = codec
        self.ledger = ledger or RefreshTokenLedger(session)
        self.event_store = event_store or EventStore(session)

    async def issue(
        self,
        user: User,
        *,
        event_type: EventType = EventType.USER_LOGGED_IN,
        failure_message: str = "Failed to login",
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> IssuedSession:
        """
        Mint access and refresh tokens and record the refresh token.

        Nothing is returned unless the ledger record is committed.

        Raises:
            AuthenticationError: If the refresh token collides with a revoked one
            InternalError: If signing or persistence fails
        """
        subject_id = user.id
        access_token = self.codec.issue(
            subject_id,
            self.settings.access_token_secret,
            self.settings.access_token_ttl,
        )
        refresh_token = self.codec.issue(
            subject_id,
            self.settings.refresh_token_secret,
            self.settings.refresh_token_ttl,
        )

        try:
            outcome = await self.ledger.record(refresh_token, subject_id)
            if outcome is RecordOutcome.REVOKED_CONFLICT:
                await self.session.rollback()
                logger.error(
                    "Fresh refresh token collides with a revoked ledger entry",
                    extra={"subject_id": subject_id, "event": event_type.value},
                )
                raise AuthenticationError(failure_message)

            await self.event_store.log(
                event_type=event_type,
                user_id=subject_id,
                payload={"username": user.username},
                ip_address=ip_address,
                user_agent=user_agent,
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception(
                "Failed to record refresh token",
                extra={"subject_id": subject_id, "event": event_type.value},
            )
            raise InternalError(failure_message) from e

        logger.info(
            "Session issued",
            extra={"subject_id": subject_id, "event": event_type.value, "ledger": outcome.value},
        )
        return IssuedSession(user=user, access_token=access_token, refresh_token=refresh_token)


class SessionRenewer:
    """Exchanges a valid refresh token for a new access token."""

    def __init__(
        self,
        settings: Settings,
        codec: TokenCodec,
        ledger: RefreshTokenLedger,
    ):
        self.settings = settings
        self.codec = codec
        self.ledger = ledger

    async def renew(self, refresh_token: Optional[str]) -> str:
        """
        Issue a new access token. The refresh token is not rotated and the
        ledger is only read.

        Raises:
            AuthenticationError: Missing, invalid, expired or revoked token
            InternalError: If the ledger cannot be read
        """
        if not refresh_token:
            logger.info("Renewal rejected, no refresh token presented")
            raise AuthenticationError(UNAUTHORIZED)

        result = self.codec.verify(refresh_token, self.settings.refresh_token_secret)
        if not result.ok:
            logger.info("Renewal rejected", extra={"reason": result.failure.value})
            raise AuthenticationError(UNAUTHORIZED)

        subject_id = result.claim.subject_id
        try:
            revoked = await self.ledger.is_revoked(refresh_token)
        except SQLAlchemyError as e:
            logger.exception("Ledger lookup failed during renewal", extra={"subject_id": subject_id})
            raise InternalError("Failed to renew token") from e

        if revoked:
            logger.warning("Renewal rejected, refresh token revoked", extra={"subject_id": subject_id})
            raise AuthenticationError(UNAUTHORIZED)

        access_token = self.codec.issue(
            subject_id,
            self.settings.access_token_secret,
            self.settings.access_token_ttl,
        )
        logger.info("Access token renewed", extra={"subject_id": subject_id})
        return access_token


class SessionRevoker:
    """Revokes the refresh token presented at logout."""

    def __init__(
        self,
        session: AsyncSession,
        ledger: Optional[RefreshTokenLedger] = None,
        event_store: Optional[EventStore] = None,
    ):
        self.session = session
        self.ledger = ledger or RefreshTokenLedger(session)
        self.event_store = event_store or EventStore(session)

    async def revoke(
        self,
        refresh_token: Optional[str],
        *,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        """
        Revoke a refresh token in the ledger.

        Raises:
            AuthenticationError: Token missing, unknown or already revoked
            InternalError: If persistence fails
        """
        if not refresh_token:
            logger.info("Logout rejected, no refresh token presented")
            raise AuthenticationError(UNAUTHORIZED)

        try:
            outcome = await self.ledger.revoke(refresh_token)
            if outcome is RevokeOutcome.ALREADY_UNAUTHORIZED:
                await self.session.rollback()
                logger.warning("Logout rejected, refresh token unknown or already revoked")
                raise AuthenticationError(UNAUTHORIZED)

            subject_id = await self.ledger.owner_of(refresh_token)
            await self.event_store.log(
                event_type=EventType.USER_LOGGED_OUT,
                user_id=subject_id,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Failed to revoke refresh token")
            raise InternalError("Error logging out") from e

        logger.info("Refresh token revoked", extra={"subject_id": subject_id})
