from datetime import datetime, timedelta

import pytest

from orderdesk.data.errors import NotFoundError, StoreError
from orderdesk.data.models import OrderFilters, OrderStatus
from orderdesk.data.util import get_order_store
from orderdesk.data.backends.http_backend import HttpOrderStore
from orderdesk.data.backends.memory_backend import InMemoryOrderStore


def test_seeded_catalog(store, catalog):
    assert set(catalog) == {"Beer", "Cocktails", "Food", "Soft Drinks"}
    beer = store.get_category("beer")
    assert beer.name == "Beer"
    assert store.get_product("craft-ipa").price == 5
    listed = {c.name: c for c in store.list_categories()}
    assert len(listed["Beer"].products) == 4
    assert listed["Food"].is_food


def test_create_order_defaults_pending(store):
    order = store.create_order({"tableName": "4"})
    assert order.order_status == OrderStatus.PENDING
    assert order.document_id
    assert store.get_order(order.document_id).table_name == "4"


def test_reads_are_copies(store):
    order = store.create_order({"tableName": "4"})
    order.table_name = "changed"
    assert store.get_order(order.key).table_name == "4"


def test_update_unknown_raises(store):
    with pytest.raises(NotFoundError):
        store.update_order("missing", {"orderStatus": "paid"})
    with pytest.raises(NotFoundError):
        store.update_order_row("missing", {"orderRowStatus": "paid"})


def test_rows_embed_products(store, catalog):
    order = store.create_order({"tableName": "4"})
    store.create_order_row({"quantity": 2, "order_doc_id": order.key, "product_doc_id": "draft-lager"})
    rows = store.list_order_rows(order.key)
    assert len(rows) == 1
    assert rows[0].product.name == "Draft Lager"


def test_list_orders_filters():
    now = datetime(2026, 3, 14, 20, 0).astimezone()
    clock = {"now": now}
    store = InMemoryOrderStore(clock=lambda: clock["now"])
    store.create_order({"tableName": "old"})
    clock["now"] = now + timedelta(hours=1)
    store.create_order({"tableName": "new", "orderStatus": "served"})

    assert [o.table_name for o in store.list_orders()] == ["new", "old"]
    served = store.list_orders(OrderFilters(order_status=OrderStatus.SERVED))
    assert [o.table_name for o in served] == ["new"]
    windowed = store.list_orders(OrderFilters(created_from=now, created_to=now + timedelta(minutes=30)))
    assert [o.table_name for o in windowed] == ["old"]


def test_fail_next_and_call_log(store):
    order = store.create_order({"tableName": "4"})
    store.fail_next("update_order", order.key)
    with pytest.raises(StoreError):
        store.update_order(order.key, {"orderStatus": "served"})
    store.update_order(order.key, {"orderStatus": "served"})
    assert store.count("update_order", order.key) == 2
    assert store.get_order(order.key).order_status == OrderStatus.SERVED


def test_get_order_store_kinds():
    assert isinstance(get_order_store(), InMemoryOrderStore)
    assert isinstance(get_order_store("http"), HttpOrderStore)
    with pytest.raises(ValueError):
        get_order_store("csv")


def test_list_orders_excludes_document_id(store):
    keep = store.create_order({"tableName": "keep"})
    skip = store.create_order({"tableName": "skip"})
    listed = store.list_orders(OrderFilters(exclude_document_id=skip.key))
    assert [o.key for o in listed] == [keep.key]
