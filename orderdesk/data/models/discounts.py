from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Dict, List, Literal, Optional, Set

from pydantic import BaseModel, Field, model_validator


class DiscountKind(str, Enum):
    """Pipeline stages, listed in the order they are applied to a unit price."""
    FIXED_PRICE_REMAP = "fixed_price_remap"
    FLAT_AMOUNT_OFF = "flat_amount_off"
    CATEGORY_PERCENTAGE = "category_percentage"
    GLOBAL_PERCENTAGE = "global_percentage"


STAGE_ORDER: List[DiscountKind] = [
    DiscountKind.FIXED_PRICE_REMAP,
    DiscountKind.FLAT_AMOUNT_OFF,
    DiscountKind.CATEGORY_PERCENTAGE,
    DiscountKind.GLOBAL_PERCENTAGE,
]


class DiscountRule(BaseModel):
    """A named discount toggle tied to a fixed pricing rule."""
    key: str = Field(description="Stable toggle identifier")
    label: str = Field(description="Human-readable name written into the discount summary")
    kind: DiscountKind = Field(description="Pipeline stage this rule belongs to")
    category: Optional[str] = Field(default=None, description="Category name the rule is scoped to (case-insensitive)")
    price_map: Dict[Decimal, Decimal] = Field(default_factory=dict, description="Original price -> discounted price")
    amount: Decimal = Field(default=Decimal("0"), description="Flat amount off per unit")
    rate: Decimal = Field(default=Decimal("0"), description="Fractional rate off, e.g. 0.15")

    @model_validator(mode="after")
    def _check_shape(self) -> "DiscountRule":
        if self.kind != DiscountKind.GLOBAL_PERCENTAGE and not self.category:
            raise ValueError(f"discount rule '{self.key}' needs a category")
        if not (Decimal("0") <= self.rate < Decimal("1")):
            raise ValueError(f"discount rule '{self.key}' rate must be in [0, 1)")
        if self.amount < 0:
            raise ValueError(f"discount rule '{self.key}' amount must be non-negative")
        return self

    def matches(self, category_name: Optional[str]) -> bool:
        """Whether this rule applies to a line in the given category."""
        if self.kind == DiscountKind.GLOBAL_PERCENTAGE:
            return True
        if not category_name:
            return False
        return category_name.strip().lower() == self.category.strip().lower()


DEFAULT_DISCOUNT_RULES: List[DiscountRule] = [
    DiscountRule(
        key="khmer_customer",
        label="Khmer Customer Discount (Beer prices adjusted)",
        kind=DiscountKind.FIXED_PRICE_REMAP,
        category="beer",
        price_map={Decimal("3"): Decimal("1.75"), Decimal("5"): Decimal("3")},
    ),
    DiscountRule(
        key="cbac_members",
        label="CBAC Members Discount (Beer: -$1 per item)",
        kind=DiscountKind.FLAT_AMOUNT_OFF,
        category="beer",
        amount=Decimal("1"),
    ),
    DiscountRule(
        key="beer_happy_hour",
        label="Beer Happy Hour (20% off beer)",
        kind=DiscountKind.CATEGORY_PERCENTAGE,
        category="beer",
        rate=Decimal("0.20"),
    ),
    DiscountRule(
        key="kandal_village_friend",
        label="Kandal Village Friend Discount (15% off total order row)",
        kind=DiscountKind.GLOBAL_PERCENTAGE,
        rate=Decimal("0.15"),
    ),
]


class CustomDiscount(BaseModel):
    """Operator-entered discount applied once to the order total."""
    value: Decimal = Field(default=Decimal("0"), ge=0, description="Dollar amount or percentage")
    type: Literal["dollar", "percentage"] = Field(default="dollar", description="How value is interpreted")

    @model_validator(mode="after")
    def _cap_percentage(self) -> "CustomDiscount":
        if self.type == "percentage" and self.value > 100:
            raise ValueError("percentage discount cannot exceed 100")
        return self

    @property
    def is_active(self) -> bool:
        return self.value > 0

    def describe(self) -> str:
        if self.type == "dollar":
            return f"Custom Discount: -${self.value:.2f}"
        return f"Custom Discount: {self.value:.1f}% off"


class DiscountSelection(BaseModel):
    """Discounts chosen for one checkout session. Never persisted as structured data."""
    active_keys: Set[str] = Field(default_factory=set, description="Keys of enabled discount toggles")
    custom: CustomDiscount = Field(default_factory=CustomDiscount, description="Optional custom discount")
