"""
Identity service for user lookup, registration and credential checks.
"""

from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from sessionvault.errors import AuthenticationError, ConflictError, InternalError
from sessionvault.kernel.identity.password import CredentialVerifierError, PasswordHasher
from sessionvault.kernel.models.user import User, UserRole
from sessionvault.logging_config import get_logger

logger = get_logger(__name__)

LOGIN_FAILED = "Failed to login"
REGISTER_FAILED = "Failed to register"


class IdentityService:
    """
    Service for user identity operations.

    Owns the users table; the session flows only ever receive a persisted
    ``User`` from here.
    """

    def __init__(self, session: AsyncSession, hasher: Optional[PasswordHasher] = None):
        self.session = session
        self.hasher = hasher or PasswordHasher()

    async def register_user(
        self,
        *,
        username: str,
        email: str,
        password: str,
        display_name: str,
        date_of_birth: date,
        role: UserRole = UserRole.PLAYER,
    ) -> User:
        """
        Create a user. The row is flushed, not committed.

        Raises:
            ConflictError: If the email or username is already used
            InternalError: If the store fails
        """
        try:
            taken = await self._taken_field(email=email, username=username)
            if taken:
                logger.info(
                    "Registration rejected, unique field in use",
                    extra={"field": taken, "username": username},
                )
                raise ConflictError(taken)

            password_hash = await run_in_threadpool(self.hasher.hash, password)
            user = User(
                email=email,
                username=username,
                password_hash=password_hash,
                display_name=display_name.strip(),
                role=role,
                date_of_birth=date_of_birth,
            )
            self.session.add(user)
            await self.session.flush()
        except IntegrityError as e:
            # Lost a race against a concurrent registration
            await self.session.rollback()
            taken = await self._taken_field(email=email, username=username)
            logger.info(
                "Registration rejected by unique constraint",
                extra={"field": taken, "username": username},
            )
            raise ConflictError(taken or "email") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Registration failed", extra={"username": username})
            raise InternalError(REGISTER_FAILED) from e

        return user

    async def authenticate(self, identifier: str, password: str) -> User:
        """
        Resolve a user by email or username and check the password.

        Raises:
            AuthenticationError: Unknown user or wrong password (404, same message)
            InternalError: If the store or the credential verifier fails
        """
        try:
            user = await self.get_user_by_email(identifier)
            if user is None:
                user = await self.get_user_by_username(identifier)
        except SQLAlchemyError as e:
            logger.exception("User lookup failed", extra={"identifier": identifier})
            raise InternalError(LOGIN_FAILED) from e

        if user is None:
            await run_in_threadpool(self.hasher.verify_dummy, password)
            logger.warning("Login failed, unknown identifier", extra={"identifier": identifier})
            raise AuthenticationError(LOGIN_FAILED, status_code=404)

        try:
            verified = await run_in_threadpool(self.hasher.verify, password, user.password_hash)
        except CredentialVerifierError as e:
            logger.error(
                "Credential verifier failed",
                extra={"identifier": identifier, "subject_id": user.id},
            )
            raise InternalError(LOGIN_FAILED) from e

        if not verified:
            logger.warning(
                "Login failed, credential mismatch",
                extra={"identifier": identifier, "subject_id": user.id},
            )
            raise AuthenticationError(LOGIN_FAILED, status_code=404)

        return user

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        """Get a user by ID."""
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email."""
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_user_by_username(self, username: str) -> Optional[User]:
        """Get a user by username."""
        result = await self.session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def _taken_field(self, *, email: str, username: str) -> Optional[str]:
        if await self.get_user_by_email(email) is not None:
            return "email"
        if await self.get_user_by_username(username) is not None:
            return "username"
        return None
