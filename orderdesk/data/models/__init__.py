from .statuses import OrderStatus, OrderRowStatus, PaymentMethod
from .data_filters import OrderFilters

from .products import Product
from .categories import Category
from .order_rows import OrderRow
from .orders import Order
from .discounts import (
    DEFAULT_DISCOUNT_RULES,
    STAGE_ORDER,
    CustomDiscount,
    DiscountKind,
    DiscountRule,
    DiscountSelection,
)

__all__ = [
    # Statuses
    "OrderStatus",
    "OrderRowStatus",
    "PaymentMethod",
    # Filter classes
    "OrderFilters",
    # Records
    "Product",
    "Category",
    "OrderRow",
    "Order",
    # Discounts
    "DEFAULT_DISCOUNT_RULES",
    "STAGE_ORDER",
    "CustomDiscount",
    "DiscountKind",
    "DiscountRule",
    "DiscountSelection",
]
