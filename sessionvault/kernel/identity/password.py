"""
Password hashing utilities using bcrypt.

This is the credential verifier the session flows call through: a match, a
mismatch, or an internal failure when the stored hash cannot be used.
"""

from functools import lru_cache

import bcrypt

# Number of rounds for bcrypt hashing (12 is secure default)
BCRYPT_ROUNDS = 12


@lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> str:
    """Hash checked against when no account matches, one per cost factor."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(b"unknown-account", salt).decode("utf-8")


class CredentialVerifierError(Exception):
    """The stored hash is unusable; neither a match nor a mismatch."""


class PasswordHasher:
    """Password hashing service."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds

    @staticmethod
    def _truncate_password(password: str) -> bytes:
        """
        Truncate password to 72 bytes (bcrypt limit) and encode.

        bcrypt only uses the first 72 bytes of a password.
        """
        return password.encode("utf-8")[:72]

    def hash(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(self._truncate_password(password), salt)
        return hashed.decode("utf-8")

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            plain_password: Plain text password to verify
            hashed_password: Stored hashed password

        Returns:
            True if password matches, False otherwise

        Raises:
            CredentialVerifierError: If the stored hash is malformed
        """
        try:
            return bcrypt.checkpw(
                self._truncate_password(plain_password),
                hashed_password.encode("utf-8"),
            )
        except ValueError as e:
            raise CredentialVerifierError("Stored password hash is invalid") from e

    def verify_dummy(self, plain_password: str) -> bool:
        """
        Run a full bcrypt check against a fixed hash.

        Used when the account does not exist so the response takes as long
        as a real mismatch. Always returns False.
        """
        self.verify(plain_password, _dummy_hash(self.rounds))
        return False
