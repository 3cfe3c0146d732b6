from __future__ import annotations

import threading
from typing import Dict, Iterator

from fulfillment.models import Product, ProductCategory


class ProductIdGenerator:
    """Per-category monotonic ids: T0001, T0002, B0001, ..."""

    def __init__(self) -> None:
        self._counters: Dict[ProductCategory, int] = {}
        self._lock = threading.Lock()

    def next_id(self, category: ProductCategory) -> str:
        with self._lock:
            n = self._counters.get(category, 0) + 1
            self._counters[category] = n
        return f"{category.prefix}{n:04d}"


class Catalog:
    def __init__(self, id_generator: ProductIdGenerator | None = None) -> None:
        self.id_generator = id_generator or ProductIdGenerator()
        self.products: Dict[str, Product] = {}

    def add(self, name: str, category: ProductCategory) -> Product:
        product = Product(
            product_id=self.id_generator.next_id(category),
            name=name,
            category=category,
        )
        self.products[product.product_id] = product
        return product

    def get(self, product_id: str) -> Product | None:
        return self.products.get(product_id)

    def name_for(self, product_id: str) -> str:
        product = self.products.get(product_id)
        return product.name if product else product_id

    def __contains__(self, product_id: object) -> bool:
        return product_id in self.products

    def __iter__(self) -> Iterator[Product]:
        return iter(self.products.values())

    def __len__(self) -> int:
        return len(self.products)
