"""
Money and discount calculations for checkout.

All amounts are tax-inclusive Decimals. A line's unit price goes through the
discount pipeline in a fixed stage order (fixed-price remap, flat amount off,
category percentage, global percentage), is multiplied by the quantity, and
the VAT portion is then divided out of the result. The custom discount is
applied once, to the sum of all non-cancelled lines.

Both currencies are rounded up independently from the same final total:
- primary to the next 0.1,
- secondary (primary x exchange rate) to the next 100.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal
from typing import Callable, Iterable, List, Optional, Sequence, Set, Tuple

from orderdesk.data.models import (
    STAGE_ORDER,
    CustomDiscount,
    DiscountKind,
    DiscountRule,
    Order,
    OrderRow,
)
from orderdesk.logging import get_logger

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")
CENTS = Decimal("0.01")
TENTHS = Decimal("0.1")

logger = get_logger(__name__)

CategoryLookup = Callable[[Optional[str]], Optional[str]]


@dataclass(frozen=True)
class LinePrice:
    """Discounted pricing of one order row."""
    row_document_id: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    taxes: Decimal
    net: Decimal


@dataclass(frozen=True)
class CheckoutTotals:
    """Order-level totals in both currencies."""
    base_grand_total: Decimal
    total_taxes: Decimal
    total_net: Decimal
    final_total: Decimal
    refined_primary: Decimal
    secondary_total: Decimal
    refined_secondary: Decimal
    lines: List[LinePrice] = field(default_factory=list)


def active_rules(catalog: Sequence[DiscountRule], keys: Iterable[str]) -> List[DiscountRule]:
    """Rules whose key is enabled, in catalog order regardless of how keys were toggled."""
    enabled: Set[str] = set(keys)
    return [rule for rule in catalog if rule.key in enabled]


def discounted_unit_price(
    unit_price: Decimal,
    category_name: Optional[str],
    rules: Sequence[DiscountRule],
) -> Decimal:
    """Run a tax-inclusive unit price through every applicable rule, stage by stage."""
    price = Decimal(unit_price)
    for stage in STAGE_ORDER:
        for rule in rules:
            if rule.kind != stage or not rule.matches(category_name):
                continue
            if stage == DiscountKind.FIXED_PRICE_REMAP:
                price = rule.price_map.get(price, price)
            elif stage == DiscountKind.FLAT_AMOUNT_OFF:
                price = max(ZERO, price - rule.amount)
            else:
                price = price * (ONE - rule.rate)
    return price


def split_taxes(subtotal: Decimal, vat_rate: Decimal) -> Tuple[Decimal, Decimal]:
    """Split a tax-inclusive amount into (taxes, net) for a fractional VAT rate."""
    if vat_rate <= 0:
        return ZERO, subtotal
    taxes = subtotal - (subtotal / (ONE + vat_rate))
    return taxes, subtotal - taxes


def apply_custom_discount(base_grand_total: Decimal, custom: Optional[CustomDiscount]) -> Decimal:
    if custom is None or not custom.is_active:
        return base_grand_total
    if custom.type == "dollar":
        return max(ZERO, base_grand_total - custom.value)
    return base_grand_total * (ONE - custom.value / HUNDRED)


def refine_primary(total: Decimal) -> Decimal:
    """Round up to the next 0.1 of the primary currency."""
    return (total * 10).to_integral_value(rounding=ROUND_CEILING) / 10


def to_secondary(total: Decimal, exchange_rate: Decimal | int) -> Decimal:
    return total * Decimal(exchange_rate)


def refine_secondary(amount: Decimal) -> Decimal:
    """Round up to the next 100 units of the secondary currency."""
    return (amount / HUNDRED).to_integral_value(rounding=ROUND_CEILING) * HUNDRED


def price_line(
    row: OrderRow,
    rules: Sequence[DiscountRule],
    category_name: Optional[str],
) -> LinePrice:
    product = row.product
    if product is None or product.price is None:
        logger.warning(f"Row {row.document_id} has no product price; pricing it at 0")
        unit_price, vat_rate = ZERO, ZERO
    else:
        unit_price, vat_rate = product.price, product.vat_rate
    unit_price = discounted_unit_price(unit_price, category_name, rules)
    subtotal = unit_price * row.quantity
    taxes, net = split_taxes(subtotal, vat_rate)
    return LinePrice(
        row_document_id=row.document_id,
        quantity=row.quantity,
        unit_price=unit_price,
        subtotal=subtotal,
        taxes=taxes,
        net=net,
    )


def price_order(
    order: Order,
    rules: Sequence[DiscountRule],
    custom: Optional[CustomDiscount],
    category_lookup: CategoryLookup,
    exchange_rate: Decimal | int,
) -> CheckoutTotals:
    """Price every non-cancelled row, aggregate, then apply the custom discount and rounding."""
    lines: List[LinePrice] = []
    for row in order.active_rows:
        category_name = category_lookup(row.category_doc_id) if rules else None
        lines.append(price_line(row, rules, category_name))

    base_grand_total = sum((line.subtotal for line in lines), ZERO)
    total_taxes = sum((line.taxes for line in lines), ZERO)
    total_net = sum((line.net for line in lines), ZERO)

    final_total = apply_custom_discount(base_grand_total, custom)
    secondary_total = to_secondary(final_total, exchange_rate)
    totals = CheckoutTotals(
        base_grand_total=base_grand_total,
        total_taxes=total_taxes,
        total_net=total_net,
        final_total=final_total,
        refined_primary=refine_primary(final_total),
        secondary_total=secondary_total,
        refined_secondary=refine_secondary(secondary_total),
        lines=lines,
    )
    logger.debug(
        f"Priced order {order.key}: base={base_grand_total:.4f} final={final_total:.4f} "
        f"refined={totals.refined_primary} secondary={totals.refined_secondary}"
    )
    return totals


def new_row_amounts(price: Decimal, vat: Decimal, quantity: int) -> Tuple[Decimal, Decimal]:
    """Subtotal and VAT portion stored on a freshly created row, both to the cent."""
    total = Decimal(price) * quantity
    vat = Decimal(vat or 0)
    taxes = total * vat / (HUNDRED + vat) if vat > 0 else ZERO
    return (
        total.quantize(CENTS, rounding=ROUND_HALF_UP),
        taxes.quantize(CENTS, rounding=ROUND_HALF_UP),
    )


def wire_money(amount: Decimal, places: Decimal = CENTS) -> float:
    """Store-bound monetary value: a JSON number at fixed precision."""
    return float(Decimal(amount).quantize(places, rounding=ROUND_HALF_UP))
