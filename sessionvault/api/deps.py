"""
FastAPI dependencies for configuration, database sessions and the access guard.

Everything is resolved from ``request.app.state``, which the application
factory populates; there is no process-wide client object.
"""

from dataclasses import dataclass
from typing import Annotated, AsyncGenerator, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from sessionvault.api.cookies import ACCESS_COOKIE, CredentialCookies
from sessionvault.config import Settings
from sessionvault.errors import UNAUTHORIZED, AuthenticationError
from sessionvault.kernel.identity.password import PasswordHasher
from sessionvault.kernel.identity.tokens import IdentityClaim, TokenCodec
from sessionvault.logging_config import get_logger

logger = get_logger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


AppSettings = Annotated[Settings, Depends(get_app_settings)]


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields database sessions."""
    async with request.app.state.database.session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_token_codec(request: Request, settings: AppSettings) -> TokenCodec:
    return TokenCodec(algorithm=settings.algorithm, clock=request.app.state.clock)


Codec = Annotated[TokenCodec, Depends(get_token_codec)]


def get_password_hasher(settings: AppSettings) -> PasswordHasher:
    return PasswordHasher(rounds=settings.bcrypt_rounds)


Hasher = Annotated[PasswordHasher, Depends(get_password_hasher)]


def get_credential_cookies(settings: AppSettings) -> CredentialCookies:
    return CredentialCookies(settings)


Cookies = Annotated[CredentialCookies, Depends(get_credential_cookies)]


@dataclass(frozen=True)
class AccessContext:
    """Identity resolved from a verified access token."""

    subject_id: int
    claim: IdentityClaim


async def require_access(
    request: Request,
    settings: AppSettings,
    codec: Codec,
) -> AccessContext:
    """
    Access guard for protected operations.

    Verifies the access cookie and never consults the refresh token ledger,
    so an access token stays usable until it expires.
    """
    token = request.cookies.get(ACCESS_COOKIE)
    if not token:
        logger.info("Access denied, no access token", extra={"path": request.url.path})
        raise AuthenticationError(UNAUTHORIZED)

    result = codec.verify(token, settings.access_token_secret)
    if not result.ok:
        logger.info(
            "Access denied",
            extra={"path": request.url.path, "reason": result.failure.value},
        )
        raise AuthenticationError(UNAUTHORIZED)

    request.state.subject_id = result.claim.subject_id
    return AccessContext(subject_id=result.claim.subject_id, claim=result.claim)


CurrentAccess = Annotated[AccessContext, Depends(require_access)]


def get_client_ip(request: Request) -> Optional[str]:
    """Extract client IP from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def get_user_agent(request: Request) -> Optional[str]:
    """Extract user agent from request."""
    return request.headers.get("User-Agent")
