"""
auth/models.py -- Domain dataclasses for authentication entities.

Pure data containers, zero logic. Stores and routes do the work.

Layer rule: no imports from api/, core/ or catalog/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Credential:
    """A stored account: identifier (email) plus its bcrypt hash.

    The raw password never appears here -- only the hash crosses component
    boundaries after registration.
    """

    account_id: str
    email: str
    password_hash: str
    created_at: str | None = None


@dataclass(frozen=True)
class SessionClaims:
    """Decoded token payload. expires_at is always issued_at + TTL."""

    user_id: str
    email: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class Identity:
    """Authenticated caller attached to request.state by the request gate."""

    user_id: str
    email: str

    @classmethod
    def from_claims(cls, claims: SessionClaims) -> Identity:
        return cls(user_id=claims.user_id, email=claims.email)
