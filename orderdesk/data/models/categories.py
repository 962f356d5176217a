from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .products import Product


class Category(BaseModel):
    """Catalog category with its products."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[int] = Field(default=None, description="Numeric store identifier")
    document_id: Optional[str] = Field(default=None, alias="documentId", description="Stable external key")
    name: str = Field(default="Unnamed Category", description="Category name")
    is_food: bool = Field(default=False, alias="isFood", description="Kitchen-routed category")
    products: List[Product] = Field(default_factory=list, description="Products in this category")
