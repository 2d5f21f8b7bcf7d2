"""Shared fixtures for API tests."""

import pytest
from fastapi.testclient import TestClient

from storefront.catalog.memory import reset_memory_stores
from storefront.catalog.seed import CatalogSeeder
from storefront.catalog.service import seed_memory_catalog
from storefront.main import app


@pytest.fixture(autouse=True)
def demo_catalog() -> None:
    """Reset the in-memory stores and seed the demo catalog."""
    reset_memory_stores()
    seed_memory_catalog()


@pytest.fixture
def client() -> TestClient:
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def shirt_id() -> str:
    """Get the ID of the first seeded shirt."""
    demo = CatalogSeeder().build()
    return next(p.record.id for p in demo.products if p.category_id == "5322")
