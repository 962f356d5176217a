from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from .models import (
    Category,
    Order,
    OrderFilters,
    OrderRow,
    Product,
)


# ---- Remote store protocol ----

class OrderStore(Protocol):
    """
    Backend-agnostic contract for the remote order store.

    - Records are addressed by their stable `documentId`, never the numeric id.
    - Reads of a single record return None when it does not exist.
    - Updates are partial: only the fields passed are written (last write wins).
    - No call is transactional with any other call.
    """

    # Orders

    def get_order(self, document_id: str) -> Optional[Order]:
        """Read one order (without rows) by key."""
        ...

    def list_orders(self, filters: Optional[OrderFilters] = None) -> List[Order]:
        """List orders matching status and createdAt/paymentDaytime ranges."""
        ...

    def create_order(self, fields: Dict[str, Any]) -> Order:
        """Create an order from wire-named fields."""
        ...

    def update_order(self, document_id: str, fields: Dict[str, Any]) -> Order:
        """Partially update an order with wire-named fields."""
        ...

    # Order rows

    def list_order_rows(self, order_doc_id: str) -> List[OrderRow]:
        """List rows whose parent order key is order_doc_id."""
        ...

    def create_order_row(self, fields: Dict[str, Any]) -> OrderRow:
        """Create an order row from wire-named fields."""
        ...

    def update_order_row(self, document_id: str, fields: Dict[str, Any]) -> OrderRow:
        """Partially update an order row with wire-named fields."""
        ...

    # Catalog

    def get_product(self, document_id: str) -> Optional[Product]:
        """Read one product by key."""
        ...

    def get_category(self, document_id: str) -> Optional[Category]:
        """Read one category by key."""
        ...

    def list_categories(self) -> List[Category]:
        """List categories with their products."""
        ...
