"""
Identity Core - Authentication and token lifecycle.
"""

from sessionvault.kernel.identity.password import (
    CredentialVerifierError,
    PasswordHasher,
)
from sessionvault.kernel.identity.tokens import (
    IdentityClaim,
    TokenCodec,
    VerificationFailure,
    VerificationResult,
)
from sessionvault.kernel.identity.ledger import (
    RecordOutcome,
    RefreshTokenLedger,
    RevokeOutcome,
)
from sessionvault.kernel.identity.identity_service import IdentityService
from sessionvault.kernel.identity.sessions import (
    IssuedSession,
    SessionIssuer,
    SessionRenewer,
    SessionRevoker,
)

__all__ = [
    "CredentialVerifierError",
    "PasswordHasher",
    "IdentityClaim",
    "TokenCodec",
    "VerificationFailure",
    "VerificationResult",
    "RecordOutcome",
    "RefreshTokenLedger",
    "RevokeOutcome",
    "IdentityService",
    "IssuedSession",
    "SessionIssuer",
    "SessionRenewer",
    "SessionRevoker",
]
