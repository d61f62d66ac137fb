"""
Signed, time-bound identity tokens.

Access and refresh tokens share one claim layout and differ only in the
secret that signs them and their lifetime. Verification never raises for a
bad token: it returns a ``VerificationResult`` whose ``failure`` tells
expired, malformed and forged tokens apart.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from jose import jws, jwt
from jose.exceptions import JOSEError, JWSError, JWTError

from sessionvault.errors import InternalError

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class VerificationFailure(str, Enum):
    """Why a token was rejected."""

    EXPIRED = "expired"
    MALFORMED = "malformed"
    SIGNATURE_MISMATCH = "signature_mismatch"


@dataclass(frozen=True)
class IdentityClaim:
    """Claims embedded in every token."""

    subject_id: int
    issued_at: datetime
    expires_at: datetime
    token_id: str


@dataclass(frozen=True)
class VerificationResult:
    """Either a verified claim or the reason verification failed."""

    claim: Optional[IdentityClaim] = None
    failure: Optional[VerificationFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None and self.claim is not None

    @classmethod
    def rejected(cls, failure: VerificationFailure) -> "VerificationResult":
        return cls(failure=failure)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_claims(claims: Mapping[str, Any]) -> Optional[IdentityClaim]:
    subject_id = claims.get("user_id")
    issued_at = claims.get("iat")
    expires_at = claims.get("exp")
    token_id = claims.get("jti")

    if not (_is_int(subject_id) and _is_int(issued_at) and _is_int(expires_at)):
        return None
    if not isinstance(token_id, str) or not token_id:
        return None
    if expires_at <= issued_at:
        return None

    return IdentityClaim(
        subject_id=subject_id,
        issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc),
        expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc),
        token_id=token_id,
    )


class TokenCodec:
    """
    JWT token creation and verification.

    The secret and lifetime are passed per call so one codec serves both
    token kinds; the clock is injected so expiry can be tested.
    """

    def __init__(self, algorithm: str = "HS256", clock: Clock = utc_now):
        self.algorithm = algorithm
        self.clock = clock

    def issue(self, subject_id: int, secret: str, ttl: timedelta) -> str:
        """
        Sign a new token for a subject.

        Args:
            subject_id: User's identifier
            secret: Signing secret for this token kind
            ttl: Lifetime from now

        Returns:
            Compact JWT string

        Raises:
            InternalError: If signing fails
        """
        lifetime = int(ttl.total_seconds())
        if lifetime < 1:
            raise ValueError("Token lifetime must be at least one second")

        issued_at = int(self.clock().timestamp())
        payload = {
            "user_id": subject_id,
            "iat": issued_at,
            "exp": issued_at + lifetime,
            "jti": uuid.uuid4().hex,
        }
        try:
            return jwt.encode(payload, secret, algorithm=self.algorithm)
        except JOSEError as e:
            raise InternalError("Failed to sign token") from e

    def verify(self, token: Optional[str], secret: str) -> VerificationResult:
        """
        Verify signature, structure and expiry of a token.

        Args:
            token: Compact JWT string as presented by the caller
            secret: Secret the token is expected to be signed with

        Returns:
            VerificationResult with the claim, or the failure kind
        """
        if not token or not isinstance(token, str):
            return VerificationResult.rejected(VerificationFailure.MALFORMED)

        try:
            jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except JWTError:
            return VerificationResult.rejected(VerificationFailure.MALFORMED)

        try:
            jws.verify(token, secret, algorithms=[self.algorithm])
        except JWSError:
            return VerificationResult.rejected(VerificationFailure.SIGNATURE_MISMATCH)

        claim = _parse_claims(jwt.get_unverified_claims(token))
        if claim is None:
            return VerificationResult.rejected(VerificationFailure.MALFORMED)

        if self.clock() >= claim.expires_at:
            return VerificationResult.rejected(VerificationFailure.EXPIRED)

        return VerificationResult(claim=claim)
