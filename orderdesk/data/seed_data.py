"""
seed_data.py

Seeds a small, realistic bar/restaurant catalog into an in-memory order store,
for local development and tests.

Entities:
- categories (Beer, Cocktails, Food, Soft Drinks) and their products

Prices are tax-inclusive; VAT is a percentage.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Tuple

from .backends.memory_backend import InMemoryOrderStore
from .models import Category, Product


# name -> (is_food, [(product name, price, vat)])
CATALOG: Dict[str, Tuple[bool, List[Tuple[str, str, str]]]] = {
    "Beer": (False, [
        ("Draft Lager", "3", "10"),
        ("Angkor Can", "3", "10"),
        ("Craft IPA", "5", "10"),
        ("Imported Stout", "6.5", "10"),
    ]),
    "Cocktails": (False, [
        ("Mojito", "6", "10"),
        ("Negroni", "7", "10"),
    ]),
    "Food": (True, [
        ("Fried Rice", "4.5", "10"),
        ("Amok Curry", "7.25", "10"),
        ("Spring Rolls", "3.75", "10"),
    ]),
    "Soft Drinks": (False, [
        ("Water", "1", "0"),
        ("Iced Tea", "2", "10"),
    ]),
}


def slug(name: str) -> str:
    return name.lower().replace(" ", "-")


def seed_catalog(store: InMemoryOrderStore) -> Dict[str, Category]:
    """Create every catalog category and product; returns categories keyed by name.

    Category and product document ids are the slugged names, so tests can
    address them directly (e.g. "beer", "craft-ipa").
    """
    created: Dict[str, Category] = {}
    for category_name, (is_food, products) in CATALOG.items():
        category = store.add_category(category_name, is_food=is_food, document_id=slug(category_name))
        for product_name, price, vat in products:
            product: Product = store.add_product(
                category.document_id,
                product_name,
                price=Decimal(price),
                vat=Decimal(vat),
                document_id=slug(product_name),
            )
            category.products.append(product)
        created[category_name] = category
    return created
