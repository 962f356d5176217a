from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .products import Product
from .statuses import OrderRowStatus


class OrderRow(BaseModel):
    """One product/quantity line of an order, persisted as its own record."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[int] = Field(default=None, description="Numeric store identifier")
    document_id: str = Field(alias="documentId", description="Stable external key")
    quantity: int = Field(gt=0, description="Units ordered")
    subtotal: Decimal = Field(default=Decimal("0"), description="Line total, tax-inclusive")
    taxes_subtotal: Decimal = Field(default=Decimal("0"), alias="taxesSubtotal", description="VAT portion of the subtotal")
    order_row_status: OrderRowStatus = Field(default=OrderRowStatus.PENDING, alias="orderRowStatus", description="Row status")
    product_doc_id: Optional[str] = Field(default=None, description="Product key")
    order_doc_id: Optional[str] = Field(default=None, description="Parent order key")
    category_doc_id: Optional[str] = Field(default=None, description="Category key")
    product: Optional[Product] = Field(default=None, description="Embedded product, when loaded")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt", description="Creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt", description="Last update timestamp")
    created_by_user_name: Optional[str] = Field(default=None, alias="createdByUserName")
    updated_by_user_name: Optional[str] = Field(default=None, alias="updatedByUserName")

    @property
    def is_cancelled(self) -> bool:
        return self.order_row_status == OrderRowStatus.CANCELLED
