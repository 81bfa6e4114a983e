"""
api/routes/v1/stores.py -- Store catalog endpoints.

Routes:
  POST /api/v1/stores             -- one keyset page of stores (requires auth)
  GET  /api/v1/stores/{store_id}  -- a single store (requires auth)

The page body is {"limit": 1..100, "last_id": ..., "tag": ..., "sorted": ...,
"desc": false}. Omit last_id for the first page; an empty list means the end
was reached.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from api.models import StoreResponse, StoresPageRequest
from auth.dependencies import get_current_identity
from auth.models import Identity
from catalog.store import StoreCatalog, StoreNotFoundError

router = APIRouter()


@router.post("/stores", response_model=list[StoreResponse])
def list_stores(
    request: Request,
    body: StoresPageRequest,
    identity: Identity = Depends(get_current_identity),
) -> list[StoreResponse]:
    """Return the next page of stores, optionally filtered by tag and sorted."""
    catalog: StoreCatalog = request.app.state.catalog
    stores = catalog.list_stores(
        body.limit,
        body.last_id,
        tag=body.tag,
        sorted_by=body.sorted,
        desc=body.desc,
    )
    return [StoreResponse.from_store(s) for s in stores]


@router.get("/stores/{store_id}", response_model=StoreResponse)
def get_store(
    request: Request,
    store_id: str,
    identity: Identity = Depends(get_current_identity),
) -> StoreResponse:
    """Return one store. 404 if the id is unknown."""
    catalog: StoreCatalog = request.app.state.catalog
    try:
        store = catalog.get_store(store_id)
    except StoreNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    return StoreResponse.from_store(store)
