"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./storefront.db"

    # Catalog backend: "memory" or "database"
    catalog_backend: str = "memory"
    seed_demo_catalog: bool = True

    # Facets: "group" lifts all attribute dimensions together, "dimension" only the counted one
    facet_exclusion: str = "group"

    # Filter state
    filter_debounce_ms: int = 800

    # Variant SKUs
    sku_separator: str = "-"
    sku_fallback_root: str = "VAR"

    # Logging
    log_level: str = "INFO"

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
