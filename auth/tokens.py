"""
auth/tokens.py -- Session token issuance and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry exactly user_id, email, iat and
       exp, are valid for 24 hours, and are never renewed in place.

  Secret: injected once into TokenService at startup (api/main.py lifespan)
       from Settings.secret_key. Nothing here reads configuration, so there is
       no module-level secret and no fallback value.

  Verification order:
       1. Structure -- three base64url segments, JSON-object header/payload.
       2. Algorithm -- header alg must equal the service algorithm. Blocks
          "alg": "none" and HMAC-family substitution.
       3. Signature -- recomputed by jose over header.payload.
       4. Claims -- required fields present and typed.
       5. Expiry -- checked against this service's clock, not the issuer's.
       Each step raises its own TokenError subclass; the request gate maps all
       of them to one generic 401.

Layer rule: no imports from api/, core/ or catalog/.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from jose.exceptions import JWTClaimsError
from jose.utils import base64url_decode

from auth.errors import BadSignature, MalformedToken, SigningError, TokenExpired
from auth.models import SessionClaims

ALGORITHM = "HS256"
TOKEN_TTL = timedelta(hours=24)

_REQUIRED_CLAIMS = {"user_id": str, "email": str, "iat": int, "exp": int}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issues and verifies signed, self-contained session tokens.

    Usage:
        tokens = TokenService(settings.secret_key)
        token = tokens.issue(account_id, email)
        claims = tokens.verify(token)

    The instance holds only immutable state (secret, TTL, clock) and is safe
    to share across request threads.
    """

    def __init__(
        self,
        secret: str,
        ttl: timedelta = TOKEN_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret:
            raise ValueError("TokenService requires a non-empty signing secret")
        self._secret = secret
        self._algorithm = ALGORITHM
        self.ttl = ttl
        self._clock = clock

    # ------------------------------------------------------------------
    # Issue
    # ------------------------------------------------------------------

    def issue(self, user_id: str, email: str) -> str:
        """Sign a new token for (user_id, email), valid for self.ttl.

        Raises SigningError if jose cannot encode the claims.
        """
        issued_at = int(self._clock().timestamp())
        payload = {
            "user_id": user_id,
            "email": email,
            "iat": issued_at,
            "exp": issued_at + int(self.ttl.total_seconds()),
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=self._algorithm)
        except JWTError as exc:
            raise SigningError() from exc

    # ------------------------------------------------------------------
    # Verify
    # ------------------------------------------------------------------

    def verify(self, token: str) -> SessionClaims:
        """Return the claims embedded in token.

        Raises MalformedToken, BadSignature or TokenExpired. The identifier is
        returned as issued -- its format is not re-validated here.
        """
        header = self._parse_structure(token)

        if header.get("alg") != self._algorithm:
            raise BadSignature("Unexpected signing algorithm")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_aud": False},
            )
        except JWTClaimsError as exc:
            raise MalformedToken() from exc
        except JWTError as exc:
            raise BadSignature() from exc

        claims = _claims_from_payload(payload)
        if self._clock() > claims.expires_at:
            raise TokenExpired()
        return claims

    @staticmethod
    def _parse_structure(token: str) -> dict:
        """Check the compact JWS layout and return the decoded header."""
        if not isinstance(token, str) or token.count(".") != 2:
            raise MalformedToken()
        header_segment, payload_segment, signature_segment = token.split(".")
        if not header_segment or not payload_segment:
            raise MalformedToken()
        try:
            header = json.loads(base64url_decode(header_segment.encode("ascii")))
            payload = json.loads(base64url_decode(payload_segment.encode("ascii")))
            base64url_decode(signature_segment.encode("ascii"))
        except ValueError as exc:
            raise MalformedToken() from exc
        if not isinstance(header, dict) or not isinstance(payload, dict):
            raise MalformedToken()
        return header


def _claims_from_payload(payload: dict) -> SessionClaims:
    for name, expected in _REQUIRED_CLAIMS.items():
        value = payload.get(name)
        # bool is an int subclass; reject it for iat/exp.
        if not isinstance(value, expected) or isinstance(value, bool):
            raise MalformedToken()
    try:
        issued_at = datetime.fromtimestamp(payload["iat"], tz=timezone.utc)
        expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise MalformedToken() from exc
    return SessionClaims(
        user_id=payload["user_id"],
        email=payload["email"],
        issued_at=issued_at,
        expires_at=expires_at,
    )
