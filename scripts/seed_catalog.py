#!/usr/bin/env python3
"""Seed demo catalog script.

Creates the catalog tables and loads the deterministic demo catalog
(embedded taxonomy, brands, sizes, colors) into the configured database.

Usage:
    python scripts/seed_catalog.py --mode small
    python scripts/seed_catalog.py --mode full --seed 7
"""

import argparse
import asyncio

from storefront.catalog.seed import SeedConfig
from storefront.catalog.service import seed_database_catalog
from storefront.infrastructure.config import settings
from storefront.infrastructure.database import async_session_factory, init_models
from storefront.infrastructure.logging import configure_logging


async def seed(config: SeedConfig) -> dict[str, int]:
    """Seed the demo catalog.

    Args:
        config: Generation config.

    Returns:
        Seeded counts, empty when a catalog already exists.
    """
    async with async_session_factory() as session:
        counts = await seed_database_catalog(session, config)
        await session.commit()
        return counts


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the demo product catalog",
    )
    parser.add_argument(
        "--mode",
        choices=["small", "full"],
        default="small",
        help="Catalog size: small (~50 products) or full (~180 products)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for deterministic generation (default: 42)",
    )

    args = parser.parse_args()
    configure_logging()

    config = SeedConfig.full() if args.mode == "full" else SeedConfig.small()
    config.seed = args.seed

    print("=" * 60)
    print("Storefront Catalog Seeder")
    print("=" * 60)
    print(f"Database: {settings.database_url}")
    print(f"Mode: {args.mode}")
    print(f"Seed: {args.seed}")
    print()

    print("Creating database tables...")
    await init_models()
    print("Tables ready.")
    print()

    counts = await seed(config)
    if not counts:
        print("Catalog already present, nothing to do.")
    else:
        print(f"  ✓ Categories: {counts['categories']}")
        print(f"  ✓ Attributes: {counts['attributes']}")
        print(f"  ✓ Products: {counts['products']}")

    print()
    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
