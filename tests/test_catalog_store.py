"""Unit tests for catalog/store.py -- lookup, tag filter, sorting and keyset paging."""

import pytest

from catalog.models import Store
from catalog.store import MAX_PAGE_SIZE, SORTABLE_COLUMNS, StoreCatalog, StoreNotFoundError


@pytest.fixture
def catalog():
    store = StoreCatalog("sqlite:///:memory:")
    yield store
    store.close()


def _seed(catalog: StoreCatalog, count: int) -> list[str]:
    ids = [f"store-{i:03d}" for i in range(count)]
    # Insert out of order; paging must still follow id order.
    for store_id in reversed(ids):
        catalog.add_store(Store(name=f"Shop {store_id}", city="Berlin", rating=4.5, id=store_id))
    return ids


def test_add_store_generates_id(catalog: StoreCatalog) -> None:
    store_id = catalog.add_store(Store(name="Corner Shop"))
    assert len(store_id) == 36
    [stored] = catalog.list_stores(10)
    assert stored.id == store_id
    assert stored.name == "Corner Shop"
    assert stored.rating == 0.0
    assert stored.open_at == ""


def test_add_store_keeps_given_id(catalog: StoreCatalog) -> None:
    assert catalog.add_store(Store(name="Bakery", id="fixed-id")) == "fixed-id"


def test_fields_round_trip(catalog: StoreCatalog) -> None:
    catalog.add_store(
        Store(
            name="Bakery",
            description="Bread and pastries",
            city="Lyon",
            address="1 Rue de la Paix",
            card_img="https://img.example.com/bakery.png",
            rating=4.8,
            open_at="07:00",
            closed_at="19:30",
            id="b1",
        )
    )
    [store] = catalog.list_stores(1)
    assert store.description == "Bread and pastries"
    assert store.city == "Lyon"
    assert store.card_img == "https://img.example.com/bakery.png"
    assert store.rating == pytest.approx(4.8)
    assert (store.open_at, store.closed_at) == ("07:00", "19:30")


def test_pages_walk_catalog_in_id_order(catalog: StoreCatalog) -> None:
    ids = _seed(catalog, 7)

    seen: list[str] = []
    last_id = None
    while True:
        page = catalog.list_stores(3, last_id)
        if not page:
            break
        assert len(page) <= 3
        seen.extend(s.id for s in page)
        last_id = page[-1].id

    assert seen == ids


def test_page_after_last_id_is_exclusive(catalog: StoreCatalog) -> None:
    ids = _seed(catalog, 5)
    page = catalog.list_stores(2, ids[1])
    assert [s.id for s in page] == ids[2:4]


def test_empty_catalog_returns_empty_page(catalog: StoreCatalog) -> None:
    assert catalog.list_stores(10) == []


def test_past_the_end_returns_empty_page(catalog: StoreCatalog) -> None:
    ids = _seed(catalog, 2)
    assert catalog.list_stores(10, ids[-1]) == []


def test_max_page_size_accepted(catalog: StoreCatalog) -> None:
    _seed(catalog, 3)
    assert len(catalog.list_stores(MAX_PAGE_SIZE)) == 3


@pytest.mark.parametrize("limit", [0, -1, MAX_PAGE_SIZE + 1])
def test_limit_out_of_range_rejected(catalog: StoreCatalog, limit: int) -> None:
    with pytest.raises(ValueError):
        catalog.list_stores(limit)


def test_get_store(catalog: StoreCatalog) -> None:
    catalog.add_store(Store(name="Deli", city="Rome", tag="food", id="d1"))
    store = catalog.get_store("d1")
    assert (store.name, store.city, store.tag) == ("Deli", "Rome", "food")


def test_get_missing_store(catalog: StoreCatalog) -> None:
    with pytest.raises(StoreNotFoundError) as excinfo:
        catalog.get_store("nope")
    assert excinfo.value.store_id == "nope"
    assert excinfo.value.message == "Store does not exist"


def _seed_rated(catalog: StoreCatalog) -> None:
    rows = [
        ("s1", "Cafe Uno", 4.0, "cafe"),
        ("s2", "Bakery Due", 4.9, "bakery"),
        ("s3", "Cafe Tre", 4.0, "cafe"),
        ("s4", "Bakery Quattro", 3.1, "bakery"),
        ("s5", "Cafe Cinque", 4.9, "cafe"),
    ]
    for store_id, name, rating, tag in rows:
        catalog.add_store(Store(name=name, rating=rating, tag=tag, id=store_id))


def _walk(catalog: StoreCatalog, limit: int, **kwargs) -> list[str]:
    seen: list[str] = []
    last_id = None
    while True:
        page = catalog.list_stores(limit, last_id, **kwargs)
        if not page:
            return seen
        seen.extend(s.id for s in page)
        last_id = page[-1].id


def test_tag_filter(catalog: StoreCatalog) -> None:
    _seed_rated(catalog)
    assert _walk(catalog, 2, tag="cafe") == ["s1", "s3", "s5"]


def test_sorted_ascending_uses_id_tiebreak(catalog: StoreCatalog) -> None:
    _seed_rated(catalog)
    assert _walk(catalog, 2, sorted_by="rating") == ["s4", "s1", "s3", "s2", "s5"]


def test_sorted_descending_uses_id_tiebreak(catalog: StoreCatalog) -> None:
    _seed_rated(catalog)
    assert _walk(catalog, 2, sorted_by="rating", desc=True) == ["s2", "s5", "s1", "s3", "s4"]


def test_sorted_by_name_with_tag(catalog: StoreCatalog) -> None:
    _seed_rated(catalog)
    assert _walk(catalog, 1, tag="cafe", sorted_by="name") == ["s5", "s3", "s1"]


def test_desc_without_sort_column_keeps_id_order(catalog: StoreCatalog) -> None:
    _seed_rated(catalog)
    assert [s.id for s in catalog.list_stores(10, desc=True)] == ["s1", "s2", "s3", "s4", "s5"]


@pytest.mark.parametrize("column", ["id; DROP TABLE store", "password", "RATING"])
def test_unknown_sort_column_rejected(catalog: StoreCatalog, column: str) -> None:
    with pytest.raises(ValueError):
        catalog.list_stores(10, sorted_by=column)


def test_sortable_columns_are_store_fields() -> None:
    assert set(SORTABLE_COLUMNS) <= set(Store.__dataclass_fields__)
