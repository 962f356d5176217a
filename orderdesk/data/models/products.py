from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Product(BaseModel):
    """Catalog product. The price already includes VAT."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[int] = Field(default=None, description="Numeric store identifier")
    document_id: Optional[str] = Field(default=None, alias="documentId", description="Stable external key")
    name: str = Field(default="Unnamed Product", description="Product name")
    price: Optional[Decimal] = Field(default=None, description="Unit price, tax-inclusive")
    vat: Optional[Decimal] = Field(default=None, description="VAT rate as a percentage, e.g. 22 for 22%")
    description: Optional[str] = Field(default=None, description="Free-text description")
    image_url: Optional[str] = Field(default=None, alias="imageUrl", description="Thumbnail URL")

    @property
    def vat_rate(self) -> Decimal:
        """VAT as a fraction (22 -> 0.22); zero when unset or non-positive."""
        if self.vat is None or self.vat <= 0:
            return Decimal("0")
        return self.vat / Decimal("100")
