"""Storefront catalog core.

Faceted filter aggregation and product variant generation over a shared
attribute model, served by a FastAPI application.
"""
