"""
api/main.py -- FastAPI application entry point for Storefront.

Run with:  uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware -- credentialed CORS for the configured browser origins
  2. log_requests   -- X-Request-ID propagation and one access-log line per request

Lifespan builds the process-wide collaborators once and parks them on
app.state: settings, password hasher, token service (holding the signing
secret for the life of the process), account store and store catalog.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import HealthResponse, error_response
from api.routes.v1.auth import router as auth_router
from api.routes.v1.stores import router as stores_router
from auth.errors import AuthError, CredentialError, SigningError
from auth.passwords import PasswordHasher
from auth.store import AccountStore
from auth.tokens import TokenService
from catalog.store import StoreCatalog
from core.config import get_settings

VERSION = "0.1.0"

REQUEST_ID_HEADER = "X-Request-ID"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

_settings = get_settings()

logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("storefront.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create shared services on startup and release them on shutdown.

    The signing secret is read from Settings exactly once, here, and handed
    to TokenService. Nothing else in the process holds it.
    """
    settings = get_settings()
    logger.info("Storefront API starting up")
    app.state.settings = settings
    app.state.password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.token_service = TokenService(settings.secret_key)
    app.state.account_store = AccountStore(db_url=settings.database_url)
    app.state.catalog = StoreCatalog(db_url=settings.database_url)
    logger.info("Auth initialized (bcrypt rounds=%d)", settings.bcrypt_rounds)

    yield

    app.state.account_store.close()
    app.state.catalog.close()
    logger.info("Storefront API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Storefront API",
    description="Account registration, session login and a paginated store catalog.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "X-Requested-With", REQUEST_ID_HEADER],
    expose_headers=[REQUEST_ID_HEADER],
    max_age=3600,
)


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Tag the request with an id (client-supplied or generated) and log it.

    The id is echoed in the X-Request-ID response header and stored on
    request.state.request_id.
    """
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    request.state.request_id = request_id
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    response.headers[REQUEST_ID_HEADER] = request_id
    logger.info(
        "[%s] %s %s %d %.1fms %s",
        request_id,
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(stores_router, prefix="/api/v1", tags=["Stores"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# Every handler returns the flat {"error": "<message>"} envelope. Messages are
# fixed strings; exception detail is logged, never sent.
# ---------------------------------------------------------------------------


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """401 with the generic message of the AuthError subclass."""
    return error_response(exc.status_code, exc.message)


@app.exception_handler(CredentialError)
async def credential_error_handler(request: Request, exc: CredentialError) -> JSONResponse:
    logger.error("Credential primitive failure on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response(500, "Internal server error")


@app.exception_handler(SigningError)
async def signing_error_handler(request: Request, exc: SigningError) -> JSONResponse:
    logger.error("Token signing failed on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response(500, "Internal server error")


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """400 when the body or query does not match the request model."""
    logger.info("Request schema rejected on %s %s", request.method, request.url.path)
    return error_response(400, "Invalid request parameters")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Flatten framework HTTP errors (404, 405, ...) into the error envelope."""
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected server errors.

    The traceback goes to the log only; the client gets a generic message.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error")


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", response_model=HealthResponse, tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Report liveness and database reachability. No auth required."""
    database = "ok" if request.app.state.account_store.ping() else "error"
    return HealthResponse(version=VERSION, components={"app": "ok", "database": database})
