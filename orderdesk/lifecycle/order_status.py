from __future__ import annotations

from typing import Iterable, List

from orderdesk.data.interface import OrderStore
from orderdesk.data.models import Order, OrderRowStatus, OrderStatus
from orderdesk.logging import get_logger


def derive_order_status(statuses: Iterable[OrderRowStatus]) -> OrderStatus:
    """Order status implied by its rows' statuses.

    Checked in priority order: all cancelled, all live rows paid, all live rows
    served or paid, otherwise pending (which includes an order with no rows).
    """
    statuses: List[OrderRowStatus] = [OrderRowStatus(s) for s in statuses]
    live = [s for s in statuses if s != OrderRowStatus.CANCELLED]

    if statuses and not live:
        return OrderStatus.CANCELLED
    if live and all(s == OrderRowStatus.PAID for s in live):
        return OrderStatus.PAID
    if live and all(s in (OrderRowStatus.SERVED, OrderRowStatus.PAID) for s in live):
        return OrderStatus.SERVED
    return OrderStatus.PENDING


class OrderStatusAggregator:
    """Keeps an order's stored status in line with its rows.

    Call `sync` after every row mutation completes. Merged orders are frozen.
    """

    def __init__(self, store: OrderStore) -> None:
        self.store = store
        self.logger = get_logger(__name__)

    def sync(self, order: Order) -> Order:
        """Persist the derived status if it differs; returns the order as it now stands."""
        if order.order_status == OrderStatus.MERGED:
            self.logger.debug(f"Order {order.key} is merged; status left frozen")
            return order

        derived = derive_order_status(row.order_row_status for row in order.order_rows)
        if derived == order.order_status:
            return order

        self.store.update_order(order.key, {"orderStatus": derived.value})
        self.logger.info(f"Order {order.key} status: {order.order_status.value} -> {derived.value}")
        return order.model_copy(update={"order_status": derived})
