import pytest

from orderdesk.data.models import OrderRowStatus, OrderStatus
from orderdesk.lifecycle.order_status import OrderStatusAggregator, derive_order_status

S = OrderRowStatus


@pytest.mark.parametrize("statuses, expected", [
    ([], OrderStatus.PENDING),
    ([S.PENDING], OrderStatus.PENDING),
    ([S.SERVED, S.PENDING], OrderStatus.PENDING),
    ([S.SERVED, S.SERVED], OrderStatus.SERVED),
    ([S.SERVED, S.PAID], OrderStatus.SERVED),
    ([S.PAID, S.PAID], OrderStatus.PAID),
    ([S.PAID, S.CANCELLED], OrderStatus.PAID),
    ([S.SERVED, S.CANCELLED], OrderStatus.SERVED),
    ([S.CANCELLED, S.CANCELLED], OrderStatus.CANCELLED),
])
def test_derive(statuses, expected):
    assert derive_order_status(statuses) == expected


def test_sync_writes_only_on_change(store, make_order):
    order = make_order([("draft-lager", "beer", 1, S.SERVED)], status=OrderStatus.PENDING)
    aggregator = OrderStatusAggregator(store)

    synced = aggregator.sync(order)
    assert synced.order_status == OrderStatus.SERVED
    assert store.count("update_order", order.key) == 1

    again = aggregator.sync(synced)
    assert again.order_status == OrderStatus.SERVED
    assert store.count("update_order", order.key) == 1


def test_all_cancelled(store, make_order):
    order = make_order([("draft-lager", "beer", 1, S.CANCELLED), ("water", "soft-drinks", 2, S.CANCELLED)])
    synced = OrderStatusAggregator(store).sync(order)
    assert synced.order_status == OrderStatus.CANCELLED
    assert store.get_order(order.key).order_status == OrderStatus.CANCELLED


def test_merged_order_is_frozen(store, make_order):
    order = make_order([("draft-lager", "beer", 1, S.PAID)], status=OrderStatus.MERGED)
    synced = OrderStatusAggregator(store).sync(order)
    assert synced.order_status == OrderStatus.MERGED
    assert store.count("update_order") == 0
