"""
auth/passwords.py -- bcrypt password hashing.

bcrypt is used directly rather than through passlib: passlib's wrap-bug
detection builds a password longer than 72 bytes, which bcrypt 4.x rejects.

Cost factor defaults to 10 and is set from Settings.bcrypt_rounds at startup.
Every hash() call draws a fresh salt, so hashing the same password twice
gives two different strings.

Layer rule: no imports from api/, core/ or catalog/.
"""

from __future__ import annotations

import logging

import bcrypt

from auth.errors import HashingError

logger = logging.getLogger("storefront.auth")

DEFAULT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """One-way password hashing and verification.

    Holds only the immutable cost factor, so one instance is shared by all
    request threads.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        if not 4 <= rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")
        self.rounds = rounds
        # Timing equalization for unknown accounts, hashed at the same cost
        # as real credentials.
        self._dummy_hash = self.hash("storefront_timing_dummy")

    def hash(self, password: str) -> str:
        """Return a salted bcrypt hash of password.

        Raises HashingError if the primitive rejects the input. The password
        itself is never included in the log record.
        """
        try:
            digest = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds))
        except (ValueError, TypeError) as exc:
            logger.error("bcrypt hashing failed: %s", type(exc).__name__)
            raise HashingError() from exc
        return digest.decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Return True if password matches password_hash.

        Mismatches and malformed hashes both return False; bcrypt.checkpw
        does the constant-time comparison.
        """
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    def verify_dummy(self, password: str) -> None:
        """Run a full bcrypt check against a throwaway hash and discard the result.

        Called when an identifier has no account, so the response time matches
        a wrong-password attempt.
        """
        self.verify(password, self._dummy_hash)
