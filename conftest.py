import pytest

from orderdesk.config import set_config_for_test
from orderdesk.data.backends.memory_backend import InMemoryOrderStore
from orderdesk.data.models import Order, OrderRowStatus, OrderStatus
from orderdesk.data.seed_data import seed_catalog


@pytest.fixture(autouse=True)
def config_override(monkeypatch):
    for var in ["STORE_URL", "STORE_TOKEN", "DEFAULT_STORE_KIND", "EXCHANGE_RATE", "BUSINESS_DAY_START_HOUR"]:
        monkeypatch.delenv(var, raising=False)
    set_config_for_test(
        store_url="http://store.test",
        store_token="token-123",
        default_store_kind="memory",
        exchange_rate=4000,
        business_day_start_hour=4,
        poll_interval_seconds=0.01,
        max_parallel_requests=4,
        operator_name="Sokha",
    )
    yield


@pytest.fixture
def store():
    return InMemoryOrderStore()


@pytest.fixture
def catalog(store):
    return seed_catalog(store)


@pytest.fixture
def make_order(store, catalog):
    """Create an order with rows given as (product_doc_id, category_doc_id, quantity, status) tuples."""
    products = {p.document_id: p for category in catalog.values() for p in category.products}

    def _make(rows=(), status=OrderStatus.PENDING, table_name="T1", **fields) -> Order:
        order = store.create_order({"tableName": table_name, "orderStatus": OrderStatus(status).value, **fields})
        for product_doc_id, category_doc_id, quantity, row_status in rows:
            price = products[product_doc_id].price
            store.create_order_row({
                "quantity": quantity,
                "subtotal": float(price * quantity),
                "taxesSubtotal": 0,
                "product_doc_id": product_doc_id,
                "category_doc_id": category_doc_id,
                "order_doc_id": order.key,
                "orderRowStatus": OrderRowStatus(row_status).value,
            })
        order.order_rows = store.list_order_rows(order.key)
        store.calls.clear()
        return order

    return _make
