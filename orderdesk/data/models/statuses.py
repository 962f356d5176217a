from __future__ import annotations

from enum import Enum


class OrderStatus(str, Enum):
    """Lifecycle status stored on an order record."""
    PENDING = "pending"
    SERVED = "served"
    PAID = "paid"
    CANCELLED = "cancelled"
    MERGED = "merged"


class OrderRowStatus(str, Enum):
    """Lifecycle status stored on a single order row."""
    PENDING = "pending"
    SERVED = "served"
    PAID = "paid"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    QR = "QR"
    CASH = "cash"
