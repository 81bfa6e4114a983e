"""
auth/dependencies.py -- FastAPI Depends() gate for protected routes.

Token sources, checked in priority order:
  1. "jwt_token" cookie -- set by signup/login.
  2. Authorization: Bearer <token> header -- API clients.

Per request: Unauthenticated -> TokenPresent -> Verified -> Forwarded, or
Rejected with 401. Rejections carry one of two fixed messages:
  no token at all          -> "Authentication required"
  any verification failure -> "Invalid token"
The specific TokenError is logged at INFO and never sent to the client.

On success the Identity is stored on request.state.identity and returned to
the route. There is no database lookup: the claims are trusted as of issue.

Layer rule: no imports from api/, core/ or catalog/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.errors import AuthenticationRequired, InvalidToken, TokenError
from auth.models import Identity
from auth.tokens import TokenService

logger = logging.getLogger("storefront.auth")

TOKEN_COOKIE = "jwt_token"


def extract_token(request: Request) -> str | None:
    """Return the raw session token from the cookie or Bearer header, if any."""
    token = request.cookies.get(TOKEN_COOKIE)
    if token:
        return token

    # Auth schemes are case-insensitive (RFC 7235).
    scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer":
        token = credentials.strip()
        if token:
            return token
    return None


def authenticate_token(token: str | None, tokens: TokenService) -> Identity:
    """Resolve a raw token to an Identity or raise an AuthError.

    Transport-independent: the caller has already pulled the token (or None)
    out of the request.
    """
    if not token:
        raise AuthenticationRequired()
    try:
        claims = tokens.verify(token)
    except TokenError as exc:
        logger.info("Rejected session token: %s", type(exc).__name__)
        raise InvalidToken() from exc
    return Identity.from_claims(claims)


def get_current_identity(request: Request) -> Identity:
    """Require a valid session. Raises AuthError (rendered as HTTP 401).

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(identity: Identity = Depends(get_current_identity)): ...
    """
    tokens: TokenService = request.app.state.token_service
    identity = authenticate_token(extract_token(request), tokens)
    request.state.identity = identity
    return identity
