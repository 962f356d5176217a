"""
Order merge protocol.

Combines a served source order into a served destination order (two tables
sharing one bill). Steps run strictly in sequence:

1. copy every live source row onto the destination as a new `served` row,
2. mark the source `merged`, pointing forward to the destination,
3. point the destination back to the source,
4. merge the new rows into the in-memory destination,
5. reload the destination from the store.

The store gives no transaction across these writes. A failure stops the
protocol at that step and raises MergeError carrying what was already written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from orderdesk.data.errors import StoreError
from orderdesk.data.interface import OrderStore
from orderdesk.data.models import Order, OrderRow, OrderRowStatus, OrderStatus
from orderdesk.logging import get_logger

from .errors import MergeError, ValidationError
from .fanout import fan_out
from .money import wire_money
from .orders import OrderService


@dataclass
class MergeResult:
    order: Order
    created_rows: List[OrderRow] = field(default_factory=list)
    reloaded: bool = True


class OrderMerger:
    """Lists merge candidates and runs the merge protocol."""

    def __init__(self, store: OrderStore, service: Optional[OrderService] = None) -> None:
        self.store = store
        self.service = service or OrderService(store)
        self.logger = get_logger(__name__)

    def list_candidates(self, destination: Order, now: Optional[datetime] = None) -> List[Order]:
        """Served orders from the current business day, other than `destination`, with their rows."""
        served = self.service.list_todays_orders(
            now, status=OrderStatus.SERVED, exclude_document_id=destination.document_id
        )
        candidates = [
            order for order in served
            if order.key != destination.key
            and (destination.id is None or order.id != destination.id)
            and order.order_status == OrderStatus.SERVED
            and not order.merged_to_order_doc_id
        ]
        for outcome in fan_out(lambda order: self.store.list_order_rows(order.key), candidates):
            if outcome.ok:
                outcome.item.order_rows = outcome.result
            else:
                self.logger.warning(f"Could not load rows for order {outcome.item.key}: {outcome.error}")
                outcome.item.order_rows = []
        return candidates

    def merge(self, destination: Order, source: Order) -> MergeResult:
        if destination.key == source.key:
            raise ValidationError("An order cannot be merged into itself")
        for order in (destination, source):
            if order.order_status != OrderStatus.SERVED:
                raise ValidationError(
                    f"Only served orders can be merged; order {order.key} is {order.order_status.value}"
                )

        rows = source.order_rows or self.store.list_order_rows(source.key)
        source_rows = [row for row in rows if not row.is_cancelled]
        self.logger.info(f"Merging order {source.key} ({len(source_rows)} rows) into {destination.key}")

        # 1. copy rows, all issued together
        outcomes = fan_out(lambda row: self.store.create_order_row(self._copy_fields(row, destination)), source_rows)
        created = [outcome.result for outcome in outcomes if outcome.ok]
        failed = [outcome for outcome in outcomes if not outcome.ok]
        for outcome, row in zip(outcomes, source_rows):
            if outcome.ok and outcome.result.product is None:
                outcome.result.product = row.product
        if failed:
            self.logger.error(f"Merge {source.key} -> {destination.key}: {len(failed)} row copies failed")
            raise MergeError(f"{len(failed)} of {len(source_rows)} rows could not be copied", "copy_rows", created)

        # 2. retire the source
        try:
            self.store.update_order(source.key, {
                "orderStatus": OrderStatus.MERGED.value,
                "mergedToOrderDocId": destination.key,
            })
        except StoreError as e:
            self.logger.error(f"Merge {source.key} -> {destination.key}: source not marked merged: {e}")
            raise MergeError(f"Source order could not be marked merged: {e}", "mark_source", created) from e

        # 3. back-reference on the destination
        try:
            self.store.update_order(destination.key, {"mergedWithOrderDocId": source.key})
        except StoreError as e:
            self.logger.error(f"Merge {source.key} -> {destination.key}: destination not linked: {e}")
            raise MergeError(f"Destination order could not be linked: {e}", "link_destination", created) from e

        # 4. local view
        merged = destination.model_copy(update={
            "order_rows": [*destination.order_rows, *created],
            "merged_with_order_doc_id": source.key,
        })

        # 5. the store is the source of truth
        try:
            reloaded = self.service.load_order(destination.key)
        except StoreError as e:
            self.logger.error(f"Reload after merge into {destination.key} failed: {e}")
            reloaded = None
        if reloaded is None:
            return MergeResult(order=merged, created_rows=created, reloaded=False)
        return MergeResult(order=self.service.aggregator.sync(reloaded), created_rows=created)

    @staticmethod
    def _copy_fields(row: OrderRow, destination: Order) -> dict:
        return {
            "quantity": row.quantity,
            "subtotal": wire_money(row.subtotal),
            "taxesSubtotal": wire_money(row.taxes_subtotal),
            "product_doc_id": row.product_doc_id,
            "category_doc_id": row.category_doc_id,
            "order_doc_id": destination.key,
            "orderRowStatus": OrderRowStatus.SERVED.value,
        }
