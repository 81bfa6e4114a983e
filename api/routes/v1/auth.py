"""
api/routes/v1/auth.py -- Account and session REST endpoints.

Routes:
  POST /api/v1/auth/signup   -- register; sets JWT cookie
  POST /api/v1/auth/login    -- password login; sets JWT cookie
  POST /api/v1/auth/logout   -- expires the cookie
  GET  /api/v1/auth/me       -- identity carried by the session (requires auth)

Security:
  Signup returns the validator's message so the user can fix the input.
  Login answers every failure (bad format, unknown email, wrong password)
  with the same 401 so emails cannot be enumerated; authenticate() also
  equalizes bcrypt timing.
  Cache-Control: no-store on every response that carries a token.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import AuthResponse, CredentialsRequest, MeResponse, MessageResponse, error_response
from auth.accounts import authenticate, register_account
from auth.dependencies import TOKEN_COOKIE, get_current_identity
from auth.errors import AccountExistsError, ValidationError
from auth.models import Credential, Identity
from auth.passwords import PasswordHasher
from auth.store import AccountStore
from auth.tokens import TokenService

logger = logging.getLogger("storefront.api")

# Auth policy:
# - POST /api/v1/auth/signup: public
# - POST /api/v1/auth/login:  public
# - POST /api/v1/auth/logout: public -- clearing a cookie needs no prior auth
# - GET  /api/v1/auth/me:     requires auth (get_current_identity)
router = APIRouter()

_BAD_CREDENTIALS = "Invalid email or password"


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/signup", response_model=AuthResponse)
def signup(request: Request, body: CredentialsRequest) -> JSONResponse:
    """Create an account and start a session for it.

    400 with the first policy violation, 409 if the email is taken.
    """
    store: AccountStore = request.app.state.account_store
    hasher: PasswordHasher = request.app.state.password_hasher

    try:
        credential = register_account(store, hasher, body.email, body.password)
    except ValidationError as exc:
        logger.info("Signup rejected: %s", type(exc).__name__)
        return error_response(400, exc.message)
    except AccountExistsError as exc:
        return error_response(409, exc.message)

    return _session_response(request, credential)


@router.post("/auth/login", response_model=AuthResponse)
def login(request: Request, body: CredentialsRequest) -> JSONResponse:
    """Authenticate with email and password; set the JWT cookie."""
    store: AccountStore = request.app.state.account_store
    hasher: PasswordHasher = request.app.state.password_hasher

    credential = authenticate(store, hasher, body.email, body.password)
    if credential is None:
        resp = error_response(401, _BAD_CREDENTIALS)
        resp.headers["Cache-Control"] = "no-store"
        return resp

    return _session_response(request, credential)


@router.post("/auth/logout", response_model=MessageResponse)
async def logout(request: Request) -> JSONResponse:
    """Expire the JWT cookie. The token itself stays valid until exp."""
    resp = JSONResponse(content=MessageResponse(message="Logged out").model_dump())
    resp.delete_cookie(
        TOKEN_COOKIE,
        path="/",
        httponly=True,
        samesite="lax",
        secure=request.app.state.settings.secure_cookies,
    )
    return resp


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me", response_model=MeResponse)
async def me(identity: Identity = Depends(get_current_identity)) -> MeResponse:
    """Return the identity embedded in the caller's session token."""
    return MeResponse(user_id=identity.user_id, email=identity.email)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _session_response(request: Request, credential: Credential) -> JSONResponse:
    tokens: TokenService = request.app.state.token_service
    token = tokens.issue(credential.account_id, credential.email)
    resp = JSONResponse(
        status_code=200,
        content=AuthResponse(user_id=credential.account_id, email=credential.email).model_dump(),
    )
    set_auth_cookie(resp, token, int(tokens.ttl.total_seconds()), request.app.state.settings.secure_cookies)
    resp.headers["Cache-Control"] = "no-store"
    return resp


def set_auth_cookie(response, token: str, max_age: int, secure: bool) -> None:
    """Write the session token as an httpOnly cookie.

    httponly=True: JS cannot read the cookie.
    samesite="lax": not sent on cross-site POST.
    max_age matches the token TTL so both expire together.
    """
    response.set_cookie(
        TOKEN_COOKIE,
        value=token,
        max_age=max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=secure,
    )
