"""Pytest fixtures: a fresh two-warehouse store per test."""

import pytest

from fulfillment.catalog import Catalog
from fulfillment.engine import FulfillmentEngine
from fulfillment.models import ProductCategory
from fulfillment.store import Store


@pytest.fixture
def store() -> Store:
    store = Store()

    store.add_warehouse("W1", {"laptop": 5, "mouse": 20})
    store.add_warehouse("W2", {"laptop": 2, "keyboard": 10})

    return store


@pytest.fixture
def engine(store: Store) -> FulfillmentEngine:
    return FulfillmentEngine(store)


@pytest.fixture
def catalog() -> Catalog:
    catalog = Catalog()
    catalog.add("Laptop", ProductCategory.TECHNOLOGY)  # T0001
    catalog.add("Mouse", ProductCategory.TECHNOLOGY)  # T0002
    catalog.add("Lipstick", ProductCategory.BEAUTY)  # B0001
    return catalog


@pytest.fixture
def catalog_store(catalog: Catalog) -> Store:
    store = Store()
    store.add_warehouse("W1", {"T0001": 5, "T0002": 20})
    store.add_warehouse("W2", {"T0001": 2})
    return store
