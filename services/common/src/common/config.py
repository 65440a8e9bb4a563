"""Application-wide configuration management using Pydantic settings."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the asset directory layer.

    Environment variables override every field (``CATALOG_BASE_URL``,
    ``CATALOG_TOKEN``, ...) and a local ``.env`` file is honoured.
    """

    model_config = SettingsConfigDict(env_file=".env", env_nested_delimiter="__", extra="allow")

    environment: str = "development"
    service_name: str = "asset-directory"
    log_level: str = "INFO"

    # Remote catalog
    catalog_base_url: str = "http://localhost:9000"
    catalog_token: Optional[str] = None
    catalog_timeout: float = 30.0

    # Listing
    assets_page_size: int = 18
    filter_cache_dir: str = "~/.asset-directory"
    filter_cache_blacklist: List[str] = ["name", "serial_number", "qr_code_id"]

    # Security / tokens
    secret_key: str = "super-secret"
    algorithm: str = "HS256"
    import_export_roles: List[str] = ["DistrictAdmin", "StateAdmin"]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache configuration for the current process."""

    return Settings()  # type: ignore[arg-type]


settings = get_settings()
