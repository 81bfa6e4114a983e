"""
catalog/store.py -- SQLAlchemy Core persistence for the store catalog.

Pattern: Repository + Data Mapper, same as auth/store.py.

Paging is keyset-based: list_stores() orders by id (or by a whitelisted
column with id as tiebreak) and, given the last id the client saw, returns
only rows after it. Pages stay stable while rows are inserted, and no OFFSET
scan is needed.

Sorting never interpolates client input into SQL: the sort key is looked up
in SORTABLE_COLUMNS and the resulting Column goes through order_by().

Layer rule: no imports from api/ or auth/.
"""

import logging
import uuid
from pathlib import Path
from typing import Optional

from sqlalchemy import Column, Float, MetaData, String, Table, Text, and_, create_engine, event, or_, select
from sqlalchemy.engine import Engine

from catalog.models import Store

logger = logging.getLogger("storefront.catalog")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'storefront.db'}"

MAX_PAGE_SIZE = 100


class StoreNotFoundError(LookupError):
    """Raised by get_store() when no store has the given id."""

    message = "Store does not exist"

    def __init__(self, store_id: str) -> None:
        super().__init__(f"{self.message}: {store_id}")
        self.store_id = store_id


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_stores = Table(
    "store",
    metadata,
    Column("id", String(36), primary_key=True),  # UUID4 text
    Column("name", String(255), nullable=False),
    Column("description", Text, nullable=False, server_default=""),
    Column("city", String(255), nullable=False, server_default=""),
    Column("address", Text, nullable=False, server_default=""),
    Column("card_img", Text, nullable=False, server_default=""),
    Column("rating", Float, nullable=False, server_default="0"),
    Column("open_at", String(5), nullable=False, server_default=""),
    Column("closed_at", String(5), nullable=False, server_default=""),
    Column("tag", String(64), nullable=False, server_default="", index=True),
)

SORTABLE_COLUMNS = {
    "name": _stores.c.name,
    "city": _stores.c.city,
    "rating": _stores.c.rating,
    "open_at": _stores.c.open_at,
    "closed_at": _stores.c.closed_at,
}


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety."""
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class StoreCatalog:
    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    def add_store(self, store: Store) -> str:
        """Insert a store and return its id (generated unless store.id is set)."""
        store_id = store.id or str(uuid.uuid4())
        with self.engine.connect() as conn:
            conn.execute(
                _stores.insert().values(
                    id=store_id,
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
            )
            conn.commit()
        logger.debug("add_store: created %s", store_id)
        return store_id

    def get_store(self, store_id: str) -> Store:
        """Fetch a single store by id. Raises StoreNotFoundError if missing."""
        with self.engine.connect() as conn:
            row = conn.execute(_stores.select().where(_stores.c.id == store_id)).fetchone()
        if row is None:
            logger.info("get_store: no store %s", store_id)
            raise StoreNotFoundError(store_id)
        return _row_to_store(row)

    def list_stores(
        self,
        limit: int,
        last_id: Optional[str] = None,
        tag: Optional[str] = None,
        sorted_by: Optional[str] = None,
        desc: bool = False,
    ) -> list[Store]:
        """Return up to limit stores starting after last_id.

        Without sorted_by the order is id ascending and desc is ignored. With
        sorted_by (a key of SORTABLE_COLUMNS) the order is that column, asc or
        desc, then id ascending. tag restricts the page to stores with that tag.

        An empty list means the caller has reached the end of the catalog. A
        last_id that names no store also yields an empty page in sorted mode.
        """
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        if sorted_by is not None and sorted_by not in SORTABLE_COLUMNS:
            raise ValueError(f"cannot sort stores by {sorted_by!r}")

        query = _stores.select()
        if tag:
            query = query.where(_stores.c.tag == tag)

        if sorted_by is None:
            if last_id:
                query = query.where(_stores.c.id > last_id)
            query = query.order_by(_stores.c.id)
        else:
            column = SORTABLE_COLUMNS[sorted_by]
            if last_id:
                # Aliased so the subquery is not correlated with the outer row.
                anchor_row = _stores.alias("anchor")
                anchor = select(anchor_row.c[column.name]).where(anchor_row.c.id == last_id).scalar_subquery()
                past_anchor = column < anchor if desc else column > anchor
                query = query.where(or_(past_anchor, and_(column == anchor, _stores.c.id > last_id)))
            query = query.order_by(column.desc() if desc else column.asc(), _stores.c.id)

        query = query.limit(limit)
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        if not rows:
            logger.info("list_stores: empty page after %s", last_id or "<start>")
        return [_row_to_store(r) for r in rows]

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_store(row) -> Store:
    return Store(
        id=row.id,
        name=row.name,
        description=row.description or "",
        city=row.city or "",
        address=row.address or "",
        card_img=row.card_img or "",
        rating=float(row.rating or 0.0),
        open_at=row.open_at or "",
        closed_at=row.closed_at or "",
        tag=row.tag or "",
    )
