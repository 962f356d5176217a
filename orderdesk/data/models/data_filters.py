from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .statuses import OrderStatus


class OrderFilters(BaseModel):
    """Filters for order listings. Ranges are half-open: [from, to)."""
    order_status: Optional[OrderStatus | list[OrderStatus]] = Field(default=None, description="Status filter (single status or list of statuses)")
    created_from: Optional[datetime] = Field(default=None, description="Inclusive lower bound on createdAt")
    created_to: Optional[datetime] = Field(default=None, description="Exclusive upper bound on createdAt")
    paid_from: Optional[datetime] = Field(default=None, description="Inclusive lower bound on paymentDaytime")
    paid_to: Optional[datetime] = Field(default=None, description="Exclusive upper bound on paymentDaytime")
    exclude_document_id: Optional[str] = Field(default=None, description="Leave out the order with this documentId")

    def statuses(self) -> list[OrderStatus]:
        if self.order_status is None:
            return []
        if isinstance(self.order_status, list):
            return list(self.order_status)
        return [self.order_status]
