from __future__ import annotations

import threading
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import uuid4

from ..errors import NotFoundError, StoreError
from ..interface import OrderStore
from ..models import Category, Order, OrderFilters, OrderRow, Product
from ...logging import get_logger


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _as_aware(ts: Any) -> Optional[datetime]:
    if ts is None:
        return None
    if isinstance(ts, str):
        ts = datetime.fromisoformat(ts.replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.astimezone()
    return ts


class InMemoryOrderStore(OrderStore):
    """
    Process-local store with the same contract as the REST store.
    - Records are kept as wire-named dicts and re-validated on every read,
      so callers never share mutable state with the store.
    - Every call is appended to `calls` as (operation, key) for inspection.
    - `fail_next` injects a StoreError into the next matching call.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or _local_now
        self._lock = threading.Lock()
        self._next_id = 1
        self._orders: Dict[str, Dict[str, Any]] = {}
        self._rows: Dict[str, Dict[str, Any]] = {}
        self._products: Dict[str, Dict[str, Any]] = {}
        self._categories: Dict[str, Dict[str, Any]] = {}
        self._failures: List[Tuple[str, Optional[str], StoreError]] = []
        self.calls: List[Tuple[str, Optional[str]]] = []
        self.logger = get_logger(__name__)

    # ---------- test/dev helpers ----------

    def fail_next(self, operation: str, key: Optional[str] = None, error: Optional[StoreError] = None) -> None:
        """Make the next `operation` call (optionally only for `key`) raise `error`."""
        self._failures.append((operation, key, error or StoreError(f"{operation} failed", 500)))

    def count(self, operation: str, key: Optional[str] = None) -> int:
        """Number of recorded calls to `operation` (optionally only for `key`)."""
        return sum(1 for op, k in self.calls if op == operation and (key is None or k == key))

    def add_category(self, name: str, is_food: bool = False, document_id: Optional[str] = None) -> Category:
        with self._lock:
            record = self._new_record(document_id, {"name": name, "isFood": is_food, "products": []})
            self._categories[record["documentId"]] = record
        return Category.model_validate(record)

    def add_product(
        self, category_doc_id: str, name: str, price: Any, vat: Any = 0, document_id: Optional[str] = None
    ) -> Product:
        with self._lock:
            record = self._new_record(document_id, {"name": name, "price": price, "vat": vat})
            self._products[record["documentId"]] = record
            self._categories[category_doc_id]["products"].append(record["documentId"])
        return Product.model_validate(record)

    # ---------- internals ----------

    def _new_record(self, document_id: Optional[str], fields: Dict[str, Any]) -> Dict[str, Any]:
        now = self._clock()
        record = {
            "id": self._next_id,
            "documentId": document_id or uuid4().hex[:24],
            "createdAt": now,
            "updatedAt": now,
            **fields,
        }
        self._next_id += 1
        return record

    def _enter(self, operation: str, key: Optional[str] = None) -> None:
        self.calls.append((operation, key))
        for i, (op, k, error) in enumerate(self._failures):
            if op == operation and (k is None or k == key):
                del self._failures[i]
                self.logger.debug(f"Injected failure for {operation} {key}")
                raise error

    @staticmethod
    def _in_range(value: Any, start: Optional[datetime], end: Optional[datetime]) -> bool:
        if start is None and end is None:
            return True
        ts = _as_aware(value)
        if ts is None:
            return False
        if start is not None and ts < _as_aware(start):
            return False
        if end is not None and ts >= _as_aware(end):
            return False
        return True

    # ---------- orders ----------

    def get_order(self, document_id: str) -> Optional[Order]:
        with self._lock:
            self._enter("get_order", document_id)
            record = self._orders.get(document_id)
            return Order.model_validate(record) if record else None

    def list_orders(self, filters: Optional[OrderFilters] = None) -> List[Order]:
        filters = filters or OrderFilters()
        statuses = {s.value for s in filters.statuses()}
        with self._lock:
            self._enter("list_orders")
            matched = [
                record for record in self._orders.values()
                if (not statuses or record.get("orderStatus") in statuses)
                and record["documentId"] != filters.exclude_document_id
                and self._in_range(record.get("createdAt"), filters.created_from, filters.created_to)
                and self._in_range(record.get("paymentDaytime"), filters.paid_from, filters.paid_to)
            ]
            matched.sort(key=lambda r: _as_aware(r["createdAt"]), reverse=True)
            return [Order.model_validate(record) for record in matched]

    def create_order(self, fields: Dict[str, Any]) -> Order:
        with self._lock:
            self._enter("create_order")
            record = self._new_record(None, {"orderStatus": "pending", **fields})
            self._orders[record["documentId"]] = record
            return Order.model_validate(record)

    def update_order(self, document_id: str, fields: Dict[str, Any]) -> Order:
        with self._lock:
            self._enter("update_order", document_id)
            record = self._orders.get(document_id)
            if record is None:
                raise NotFoundError(f"Not found: orders/{document_id}", 404)
            record.update(fields)
            record["updatedAt"] = self._clock()
            return Order.model_validate(record)

    # ---------- order rows ----------

    def list_order_rows(self, order_doc_id: str) -> List[OrderRow]:
        with self._lock:
            self._enter("list_order_rows", order_doc_id)
            rows = []
            for record in self._rows.values():
                if record.get("order_doc_id") != order_doc_id:
                    continue
                row = OrderRow.model_validate(record)
                product = self._products.get(record.get("product_doc_id") or "")
                if product:
                    row.product = Product.model_validate(product)
                rows.append(row)
            return rows

    def create_order_row(self, fields: Dict[str, Any]) -> OrderRow:
        with self._lock:
            self._enter("create_order_row", fields.get("order_doc_id"))
            record = self._new_record(None, {"orderRowStatus": "pending", **fields})
            self._rows[record["documentId"]] = record
            return OrderRow.model_validate(record)

    def update_order_row(self, document_id: str, fields: Dict[str, Any]) -> OrderRow:
        with self._lock:
            self._enter("update_order_row", document_id)
            record = self._rows.get(document_id)
            if record is None:
                raise NotFoundError(f"Not found: order-rows/{document_id}", 404)
            record.update(fields)
            record["updatedAt"] = self._clock()
            return OrderRow.model_validate(record)

    # ---------- catalog ----------

    def get_product(self, document_id: str) -> Optional[Product]:
        with self._lock:
            self._enter("get_product", document_id)
            record = self._products.get(document_id)
            return Product.model_validate(record) if record else None

    def get_category(self, document_id: str) -> Optional[Category]:
        with self._lock:
            self._enter("get_category", document_id)
            record = self._categories.get(document_id)
            if record is None:
                return None
            return Category.model_validate({**record, "products": []})

    def list_categories(self) -> List[Category]:
        with self._lock:
            self._enter("list_categories")
            return [
                Category.model_validate({
                    **record,
                    "products": [self._products[key] for key in record["products"]],
                })
                for record in self._categories.values()
            ]
