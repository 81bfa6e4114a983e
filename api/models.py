"""
API request and response models for Storefront REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
separate from the dataclasses in auth/models.py and catalog/models.py, which
own the internal domain representation. Route handlers map between the two.

Credential fields are plain strings here: the login/registration policy
lives in auth/validation.py so that callers get its first-error semantics
rather than Pydantic's aggregated error list.
"""

from typing import Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from catalog.models import Store
from catalog.store import MAX_PAGE_SIZE, SORTABLE_COLUMNS

# ---------------------------------------------------------------------------
# Errors / health
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Flat error envelope returned on every 4xx/5xx response."""

    model_config = ConfigDict(frozen=True)

    error: str


def error_response(status_code: int, message: str) -> JSONResponse:
    """Render ErrorResponse with the given status; shared by handlers and routes."""
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class CredentialsRequest(BaseModel):
    """Body for POST /api/v1/auth/signup and POST /api/v1/auth/login."""

    email: str
    password: str


class AuthResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str = "OK"
    user_id: str
    email: str


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class MeResponse(BaseModel):
    """Identity of the caller as carried by the session token."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


class StoresPageRequest(BaseModel):
    """Body for POST /api/v1/stores -- one keyset page.

    sorted names a column from catalog.store.SORTABLE_COLUMNS; anything else
    is rejected here so it never reaches the query builder. desc only applies
    together with sorted.
    """

    limit: int = Field(ge=1, le=MAX_PAGE_SIZE)
    last_id: Optional[str] = None
    tag: Optional[str] = None
    sorted: Optional[str] = None
    desc: bool = False

    @field_validator("sorted")
    @classmethod
    def known_sort_column(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in SORTABLE_COLUMNS:
            raise ValueError(f"unsupported sort column: {v}")
        return v


class StoreResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    city: str
    address: str
    card_img: str
    rating: float
    open_at: str
    closed_at: str
    tag: str

    @classmethod
    def from_store(cls, store: Store) -> "StoreResponse":
        """Build a StoreResponse from a catalog Store dataclass."""
        return cls(
            id=store.id or "",
            name=store.name,
            description=store.description,
            city=store.city,
            address=store.address,
            card_img=store.card_img,
            rating=store.rating,
            open_at=store.open_at,
            closed_at=store.closed_at,
            tag=store.tag,
        )
