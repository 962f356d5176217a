from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .order_rows import OrderRow
from .statuses import OrderStatus, PaymentMethod


class Order(BaseModel):
    """Order record; the aggregate root owning its rows."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[int] = Field(default=None, description="Numeric store identifier")
    document_id: Optional[str] = Field(default=None, alias="documentId", description="Stable external key")
    order_status: OrderStatus = Field(default=OrderStatus.PENDING, alias="orderStatus", description="Order status")
    table_name: Optional[str] = Field(default=None, alias="tableName", description="Table name or number")
    customer_name: Optional[str] = Field(default=None, alias="customerName", description="Customer name")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt", description="Creation timestamp")
    payment_daytime: Optional[datetime] = Field(default=None, alias="paymentDaytime", description="Payment timestamp")
    payment_method: Optional[PaymentMethod] = Field(default=None, alias="paymentMethod", description="QR or cash")
    paid_amount: Optional[Decimal] = Field(default=None, alias="paidAmount", description="Refined primary-currency total")
    applied_discount: Optional[str] = Field(default=None, alias="appliedDiscount", description="Discount summary written at payment")
    merged_with_order_doc_id: Optional[str] = Field(
        default=None, alias="mergedWithOrderDocId", description="Merge source absorbed by this order"
    )
    merged_to_order_doc_id: Optional[str] = Field(
        default=None, alias="mergedToOrderDocId", description="Destination this order was merged into"
    )
    order_rows: List[OrderRow] = Field(default_factory=list, description="Rows owned by this order")

    @property
    def active_rows(self) -> List[OrderRow]:
        """Rows that are not cancelled."""
        return [row for row in self.order_rows if not row.is_cancelled]

    @property
    def key(self) -> str:
        """Store key for this order, falling back to the numeric id."""
        if self.document_id:
            return self.document_id
        return str(self.id)
