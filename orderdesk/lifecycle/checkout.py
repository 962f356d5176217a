"""
Checkout orchestration.

A CheckoutSession starts with no discounts selected, prices the order on
demand and, on pay(), writes in this order:

1. the order record (paid status, payment time, method, amount, discount summary),
2. the merge source, re-asserted as `merged`, when the order absorbed one,
3. one `paid` update per live row, all issued together.

The checkout is committed once step 1 succeeds. Failures in steps 2 and 3
are logged and reported on the result, never rolled back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from orderdesk.config import get_config
from orderdesk.data.errors import StoreError
from orderdesk.data.interface import OrderStore
from orderdesk.data.models import (
    DEFAULT_DISCOUNT_RULES,
    CustomDiscount,
    DiscountRule,
    DiscountSelection,
    Order,
    OrderRow,
    OrderRowStatus,
    OrderStatus,
    PaymentMethod,
)
from orderdesk.logging import get_logger

from .category_cache import CategoryNameCache
from .errors import CheckoutError, ValidationError
from .fanout import fan_out
from .money import TENTHS, CheckoutTotals, active_rules, price_order, wire_money

NO_DISCOUNTS = "No discounts applied"


@dataclass
class CheckoutResult:
    order: Order
    totals: CheckoutTotals
    discount_summary: str
    failed_rows: List[OrderRow] = field(default_factory=list)
    source_finalized: Optional[bool] = None


def _utc_iso(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CheckoutSession:
    """Discount selection, totals and payment for one order."""

    def __init__(
        self,
        order: Order,
        store: OrderStore,
        rules: Optional[Sequence[DiscountRule]] = None,
        category_cache: Optional[CategoryNameCache] = None,
        exchange_rate: Optional[int] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.order = order
        self.store = store
        self.rules: List[DiscountRule] = list(rules if rules is not None else DEFAULT_DISCOUNT_RULES)
        self.category_cache = category_cache or CategoryNameCache(store)
        self.exchange_rate = exchange_rate if exchange_rate is not None else get_config().exchange_rate
        self.clock = clock or (lambda: datetime.now().astimezone())
        self.selection = DiscountSelection()
        self.logger = get_logger(__name__)

    # ---- Discount selection ----

    def toggle(self, key: str, enabled: bool = True) -> None:
        if key not in {rule.key for rule in self.rules}:
            raise ValidationError(f"Unknown discount '{key}'")
        if enabled:
            self.selection.active_keys.add(key)
        else:
            self.selection.active_keys.discard(key)

    def set_custom_discount(self, value, type: str = "dollar") -> None:
        try:
            self.selection.custom = CustomDiscount(value=value, type=type)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid custom discount {value!r} ({type}): {e.errors()[0]['msg']}") from e

    def clear_custom_discount(self) -> None:
        self.selection.custom = CustomDiscount()

    # ---- Derived values ----

    def totals(self) -> CheckoutTotals:
        return price_order(
            self.order,
            active_rules(self.rules, self.selection.active_keys),
            self.selection.custom,
            self.category_cache.get,
            self.exchange_rate,
        )

    def discount_summary(self) -> str:
        """Names of active discounts in catalog order, then the custom one, joined by '; '."""
        parts = [rule.label for rule in active_rules(self.rules, self.selection.active_keys)]
        if self.selection.custom.is_active:
            parts.append(self.selection.custom.describe())
        return "; ".join(parts) if parts else NO_DISCOUNTS

    def can_pay(self) -> bool:
        closed = (OrderStatus.PAID, OrderStatus.MERGED)
        return bool(self.order.active_rows) and self.order.order_status not in closed

    # ---- Payment ----

    def pay(self, method: PaymentMethod | str) -> CheckoutResult:
        """Commit payment for the order.

        Raises:
            ValidationError: unknown method, or nothing payable.
            CheckoutError: the order record could not be marked paid; nothing else was written.
        """
        try:
            method = PaymentMethod(method)
        except ValueError as e:
            raise ValidationError(f"Unknown payment method {method!r}") from e
        if not self.can_pay():
            raise ValidationError(f"Order {self.order.key} has nothing to pay")

        totals = self.totals()
        summary = self.discount_summary()
        paid_at = self.clock()
        order = self.order

        try:
            self.store.update_order(order.key, {
                "orderStatus": OrderStatus.PAID.value,
                "paymentDaytime": _utc_iso(paid_at),
                "paymentMethod": method.value,
                "paidAmount": wire_money(totals.refined_primary, TENTHS),
                "appliedDiscount": summary,
            })
        except StoreError as e:
            self.logger.error(f"Checkout of order {order.key} failed: {e}")
            raise CheckoutError(f"Order {order.key} could not be marked paid: {e}") from e
        self.logger.info(f"Order {order.key} paid by {method.value}: {totals.refined_primary} ({summary})")

        source_finalized = None
        if order.merged_with_order_doc_id:
            try:
                self.store.update_order(order.merged_with_order_doc_id, {"orderStatus": OrderStatus.MERGED.value})
                source_finalized = True
            except StoreError as e:
                self.logger.error(f"Merge source {order.merged_with_order_doc_id} not re-marked merged: {e}")
                source_finalized = False

        live_rows = order.active_rows
        outcomes = fan_out(
            lambda row: self.store.update_order_row(row.document_id, {"orderRowStatus": OrderRowStatus.PAID.value}),
            live_rows,
        )
        failed = [outcome.item for outcome in outcomes if not outcome.ok]
        for outcome in outcomes:
            if not outcome.ok:
                self.logger.error(f"Row {outcome.item.document_id} not marked paid: {outcome.error}")
        paid_keys = {outcome.item.document_id for outcome in outcomes if outcome.ok}

        self.order = order.model_copy(update={
            "order_status": OrderStatus.PAID,
            "payment_daytime": paid_at,
            "payment_method": method,
            "paid_amount": Decimal(str(wire_money(totals.refined_primary, TENTHS))),
            "applied_discount": summary,
            "order_rows": [
                row.model_copy(update={"order_row_status": OrderRowStatus.PAID}) if row.document_id in paid_keys else row
                for row in order.order_rows
            ],
        })
        return CheckoutResult(
            order=self.order,
            totals=totals,
            discount_summary=summary,
            failed_rows=failed,
            source_finalized=source_finalized,
        )
