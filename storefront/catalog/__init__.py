"""Catalog services.

Provides facet aggregation, variant combination preview and generation,
draft/applied filter state, and in-memory and SQLAlchemy storage.
"""

from storefront.catalog.combinations import preview_combinations
from storefront.catalog.facets import FacetAggregator, FacetExclusion, FacetKind, FacetResult, FacetValue
from storefront.catalog.filter_state import AppliedSnapshot, FacetFeed, FilterState
from storefront.catalog.generator import VariantGenerator
from storefront.catalog.memory import InMemoryCatalog, InMemoryVariantStore
from storefront.catalog.ports import CatalogQuery, VariantStore
from storefront.catalog.repository import CatalogRepository, VariantRepository
from storefront.catalog.seed import CatalogSeeder, SeedConfig
from storefront.catalog.service import CatalogService
from storefront.catalog.taxonomy import Category, CategoryScope, CategoryTree

__all__ = [
    # Taxonomy
    "Category",
    "CategoryScope",
    "CategoryTree",
    # Ports
    "CatalogQuery",
    "VariantStore",
    # Facets
    "FacetAggregator",
    "FacetExclusion",
    "FacetKind",
    "FacetResult",
    "FacetValue",
    # Variants
    "VariantGenerator",
    "preview_combinations",
    # Filter state
    "AppliedSnapshot",
    "FacetFeed",
    "FilterState",
    # Storage
    "CatalogRepository",
    "InMemoryCatalog",
    "InMemoryVariantStore",
    "VariantRepository",
    # Seeding
    "CatalogSeeder",
    "SeedConfig",
    # Service
    "CatalogService",
]
