"""
Order Service

Loading, creating and editing orders against the remote store. Every row
mutation made here is followed by an explicit status re-derivation of the
parent order.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from orderdesk.config import get_config
from orderdesk.data.interface import OrderStore
from orderdesk.data.models import (
    Category,
    Order,
    OrderFilters,
    OrderRow,
    OrderRowStatus,
    OrderStatus,
    Product,
)
from orderdesk.logging import get_logger

from .business_day import business_day_bounds
from .errors import ValidationError
from .fanout import fan_out
from .money import new_row_amounts, wire_money
from .order_status import OrderStatusAggregator
from .row_status import RowStatusSwitcher


def _catalog_sort_key(product: Product):
    name = "".join((product.name or "").split()).lower()
    return (product.price if product.price is not None else 0, name)


class OrderService:
    """Service for reading and editing orders."""

    def __init__(self, store: OrderStore, operator_name: Optional[str] = None) -> None:
        self.store = store
        self.operator_name = operator_name or get_config().operator_name
        self.switcher = RowStatusSwitcher(store)
        self.aggregator = OrderStatusAggregator(store)
        self.logger = get_logger(__name__)

    # ---- Reads ----

    def load_order(self, document_id: str) -> Optional[Order]:
        """Read an order with its rows and each row's product.

        Returns None when the order does not exist. Rows whose product cannot
        be found are kept without a product.
        """
        order = self.store.get_order(document_id)
        if order is None:
            self.logger.warning(f"Order {document_id} not found")
            return None

        rows = self.store.list_order_rows(order.key)
        missing = [row for row in rows if row.product is None and row.product_doc_id]
        for outcome in fan_out(lambda row: self.store.get_product(row.product_doc_id), missing):
            if not outcome.ok:
                raise outcome.error
            if outcome.result is None:
                self.logger.warning(f"Product {outcome.item.product_doc_id} missing for row {outcome.item.document_id}")
            else:
                outcome.item.product = outcome.result

        order.order_rows = sorted(rows, key=lambda r: r.id or 0)
        return order

    def list_categories(self) -> List[Category]:
        """Categories with products sorted by price, then by name ignoring spaces and case."""
        categories = self.store.list_categories()
        for category in categories:
            category.products.sort(key=_catalog_sort_key)
        return categories

    def list_todays_orders(
        self,
        now: Optional[datetime] = None,
        status: Optional[OrderStatus] = None,
        exclude_document_id: Optional[str] = None,
    ) -> List[Order]:
        """Orders created within the current business day."""
        start, end = business_day_bounds(now)
        return self.store.list_orders(OrderFilters(
            order_status=status,
            created_from=start,
            created_to=end,
            exclude_document_id=exclude_document_id,
        ))

    def list_todays_paid_orders(self, now: Optional[datetime] = None) -> List[Order]:
        """Orders paid within the current business day."""
        start, end = business_day_bounds(now)
        return self.store.list_orders(OrderFilters(order_status=OrderStatus.PAID, paid_from=start, paid_to=end))

    # ---- Writes ----

    def create_order(self, customer_name: str, table_name: str) -> Order:
        customer_name = (customer_name or "").strip()
        table_name = (table_name or "").strip()
        if not table_name and not customer_name:
            raise ValidationError("An order needs a table or a customer name")

        order = self.store.create_order({
            "customerName": customer_name,
            "tableName": table_name,
            "orderStatus": OrderStatus.PENDING.value,
            "createdByUserName": self.operator_name,
        })
        self.logger.info(f"Order {order.key} opened for table '{table_name}'")
        return order

    def add_product(self, order: Order, product: Product, quantity: int, category_doc_id: Optional[str]) -> Order:
        """Append a pending row for `product` and re-derive the order status.

        Raises:
            ValidationError: bad quantity, product without price/vat/key, or a closed order.
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError(f"Quantity must be a positive whole number, got {quantity!r}")
        if product.price is None or product.price < 0:
            raise ValidationError(f"Product '{product.name}' has no valid price")
        if product.vat is None or product.vat < 0:
            raise ValidationError(f"Product '{product.name}' has no valid VAT rate")
        if not product.document_id:
            raise ValidationError(f"Product '{product.name}' has no document id")
        if order.order_status in (OrderStatus.PAID, OrderStatus.MERGED):
            raise ValidationError(f"Order {order.key} is {order.order_status.value}; no items can be added")

        subtotal, taxes = new_row_amounts(product.price, product.vat, quantity)
        row = self.store.create_order_row({
            "quantity": quantity,
            "subtotal": wire_money(subtotal),
            "taxesSubtotal": wire_money(taxes),
            "order_doc_id": order.key,
            "product_doc_id": product.document_id,
            "category_doc_id": category_doc_id,
            "orderRowStatus": OrderRowStatus.PENDING.value,
            "createdByUserName": self.operator_name,
            "updatedByUserName": self.operator_name,
        })
        row.product = row.product or product
        self.logger.info(f"Added {quantity} x '{product.name}' to order {order.key}")

        updated = order.model_copy(update={"order_rows": [*order.order_rows, row]})
        return self.aggregator.sync(updated)

    def change_row_status(self, order: Order, row: OrderRow, target: OrderRowStatus) -> Order:
        """Transition one row, then re-derive the order status from the confirmed rows."""
        switched = self.switcher.switch(row, target)
        rows = [switched if r.document_id == row.document_id else r for r in order.order_rows]
        return self.aggregator.sync(order.model_copy(update={"order_rows": rows}))
