from datetime import datetime, timedelta

import pytest
from sqlalchemy import text

from hermes.crud.base import resolve_sort
from hermes.schemas import LookupField, OrderRecord
from hermes.services import orders as order_service
from hermes.services.exceptions import DuplicateOrderError, StoreError

BASE = datetime(2024, 2, 1, 9, 0)


def make_record(order_id, order_number, minutes=0, **fields):
    stamp = BASE + timedelta(minutes=minutes)
    return OrderRecord(id=order_id, order_number=order_number, created_at=stamp, updated_at=stamp, **fields)


@pytest.fixture
def filled(store):
    store.put(make_record("r1", "C-3", 0, material="Ст3", bottom_number="D-10"))
    store.put(make_record("r2", "A-1", 10, material="AISI 304", bottom_number="D-20"))
    store.put(make_record("r3", "B-2", 20, material="09Г2С"))
    return store


def test_put_get_roundtrip(store):
    record = make_record("r1", "A-1", executors=[{"name": "Петров", "date": "2024-02-02"}])
    assert store.put(record) == "r1"

    loaded = store.get("r1")
    assert loaded.model_dump() == record.model_dump()
    assert loaded.executors[0].name == "Петров"


def test_put_overwrites_existing(store):
    store.put(make_record("r1", "A-1", material="old"))
    store.put(make_record("r1", "A-1", material="new"))

    assert store.get("r1").material == "new"
    assert len(store.list()) == 1


def test_get_missing_returns_none(store):
    assert store.get("missing") is None


def test_delete(filled):
    assert filled.delete("r2") is True
    assert filled.delete("r2") is False
    assert filled.get("r2") is None


def test_default_listing_is_newest_first(filled):
    assert [r.id for r in filled.list()] == ["r3", "r2", "r1"]


@pytest.mark.parametrize(
    "field, direction, expected",
    [
        ("orderNumber", "asc", ["r2", "r3", "r1"]),
        ("orderNumber", "desc", ["r1", "r3", "r2"]),
        ("createdAt", "asc", ["r1", "r2", "r3"]),
        ("noSuchField", "asc", ["r1", "r2", "r3"]),
    ],
)
def test_listing_sort(filled, field, direction, expected):
    assert [r.id for r in filled.list(field, direction)] == expected


def test_resolve_sort_defaults():
    assert resolve_sort(None, None) == ("created_at", True)
    assert resolve_sort("bottomNumber", "ASC") == ("bottom_number", False)


def test_find_by_field(filled):
    assert [r.id for r in filled.find_by_field(LookupField.ORDER_NUMBER, "A-1")] == ["r2"]
    assert [r.id for r in filled.find_by_field("bottomNumber", "D-10")] == ["r1"]
    assert filled.find_by_field("orderNumber", "a-1") == []


def test_search_is_case_insensitive(filled):
    assert [r.id for r in filled.search("aisi")] == ["r2"]
    assert [r.id for r in filled.search("d-")] == ["r2", "r1"]
    assert len(filled.search("-", limit=2)) == 2


def test_clear_all(filled):
    assert filled.clear_all() == 3
    assert filled.list() == []


def test_order_number_is_unique(store):
    store.put(make_record("r1", "A-1"))

    with pytest.raises(DuplicateOrderError):
        store.put(make_record("r2", "A-1"))

    assert [r.id for r in store.list()] == ["r1"]
    # the store stays usable after a rejected write
    store.put(make_record("r2", "A-2"))
    assert len(store.list()) == 2


def test_returned_records_are_copies(memory_store):
    memory_store.put(make_record("r1", "A-1"))

    loaded = memory_store.get("r1")
    loaded.material = "changed"

    assert memory_store.get("r1").material == ""


def test_search_folds_cyrillic_case(store):
    store.put(make_record("r1", "A-1", material="Сталь 09Г2С"))
    store.put(make_record("r2", "A-2", 10, material="AISI 304"))

    assert [r.id for r in store.search("сталь")] == ["r1"]
    assert [r.id for r in store.search("09г2с")] == ["r1"]


def test_search_treats_wildcards_literally(store):
    store.put(make_record("r1", "AB-1"))
    store.put(make_record("r2", "A-2", 10, material="100%"))

    assert store.search("A_") == []
    assert [r.id for r in store.search("0%")] == ["r2"]


def test_sql_read_failures_raise_store_error(sql_store, db_session):
    sql_store.put(make_record("r1", "A-1"))
    db_session.execute(text("DROP TABLE orders"))
    db_session.commit()
    db_session.expunge_all()

    with pytest.raises(StoreError):
        sql_store.get("r1")
    with pytest.raises(StoreError):
        sql_store.list()
    with pytest.raises(StoreError):
        sql_store.find_by_field(LookupField.ORDER_NUMBER, "A-1")
    with pytest.raises(StoreError):
        sql_store.search("A-1")


def test_delete_orders_tallies_missing_ids(filled):
    result = order_service.delete_orders(filled, ["r1", "missing", "r3", "r1"])

    assert result.model_dump() == {"deleted": 2, "errors": 2}
    assert [r.id for r in filled.list()] == ["r2"]


def test_delete_orders_with_no_ids(store):
    assert order_service.delete_orders(store, []).model_dump() == {"deleted": 0, "errors": 0}
