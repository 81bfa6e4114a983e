"""
auth/errors.py -- Exception hierarchy for the auth subsystem.

Every policy violation is its own class so callers can match with except
clauses instead of comparing message strings. Each class carries a fixed
`message` that is safe to show to a client.

  ValidationError   -- user input rejected by auth/validation.py (recoverable)
  AuthError         -- request has no usable session token (recoverable, generic)
  TokenError        -- Token Service verification outcome (never shown verbatim)
  CredentialError   -- bcrypt primitive failure (fatal to the request)
  PersistenceError  -- raised by the account store

Layer rule: no imports from api/, core/ or catalog/.
"""

from __future__ import annotations


class AuthSubsystemError(Exception):
    """Base class for everything raised by auth/."""

    message: str = "Authentication subsystem error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Validation (auth/validation.py)
# ---------------------------------------------------------------------------


class ValidationError(AuthSubsystemError):
    message = "Invalid request"


class EmptyField(ValidationError):
    """A required field is empty or whitespace-only."""


class EmptyIdentifier(EmptyField):
    message = "Login is required"


class EmptyPassword(EmptyField):
    message = "Password is required"


class TooShort(ValidationError):
    message = "Login must be at least 3 characters long"


class TooLong(ValidationError):
    message = "Login must be less than 50 characters"


class MalformedIdentifier(ValidationError):
    message = "Login must be an email address made of letters, numbers, dots, dashes and underscores"


class PasswordTooShort(ValidationError):
    message = "Password must be at least 8 characters long"


class PasswordTooLong(ValidationError):
    message = "Password must be at most 72 bytes long"


class PasswordMissingUpper(ValidationError):
    message = "Password must contain at least one uppercase letter"


class PasswordMissingLower(ValidationError):
    message = "Password must contain at least one lowercase letter"


class PasswordMissingNumber(ValidationError):
    message = "Password must contain at least one number"


class PasswordMissingSpecial(ValidationError):
    message = "Password must contain at least one special character"


class PasswordEqualsIdentifier(ValidationError):
    message = "Password cannot be the same as login"


# ---------------------------------------------------------------------------
# Request gate (auth/dependencies.py)
# ---------------------------------------------------------------------------


class AuthError(AuthSubsystemError):
    """Request rejected with 401. The message never says why a token failed."""

    status_code = 401
    message = "Authentication failed"


class AuthenticationRequired(AuthError):
    message = "Authentication required"


class InvalidToken(AuthError):
    message = "Invalid token"


# ---------------------------------------------------------------------------
# Token Service (auth/tokens.py)
# ---------------------------------------------------------------------------


class TokenError(AuthSubsystemError):
    message = "Token verification failed"


class MalformedToken(TokenError):
    message = "Token is malformed"


class BadSignature(TokenError):
    message = "Token signature is invalid"


class TokenExpired(TokenError):
    message = "Token has expired"


class SigningError(AuthSubsystemError):
    message = "Token could not be signed"


# ---------------------------------------------------------------------------
# Credential Hasher (auth/passwords.py)
# ---------------------------------------------------------------------------


class CredentialError(AuthSubsystemError):
    message = "Credential primitive failure"


class HashingError(CredentialError):
    message = "Password could not be hashed"


# ---------------------------------------------------------------------------
# Persistence (auth/store.py)
# ---------------------------------------------------------------------------


class PersistenceError(AuthSubsystemError):
    message = "Storage error"


class AccountExistsError(PersistenceError):
    message = "User already exists"


class AccountNotFoundError(PersistenceError):
    message = "User not found"
