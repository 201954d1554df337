"""Configuration management for photomap.

Values come from environment variables (optionally loaded from a .env file
by the CLI) with typed defaults for a local, desktop-hosted setup.
"""

import os
from pathlib import Path
from typing import Any

from .logging_config import get_logger

logger = get_logger(__name__)

# Storage permission names, one per host permission model
READ_MEDIA_IMAGES = "READ_MEDIA_IMAGES"
READ_EXTERNAL_STORAGE = "READ_EXTERNAL_STORAGE"
WRITE_EXTERNAL_STORAGE = "WRITE_EXTERNAL_STORAGE"

DEFAULT_API_LEVEL = 34
DEFAULT_DATA_DIR = Path.home() / ".photomap"


class Config:
    """Centralized configuration management using environment variables."""

    def __init__(self):
        self._cache = {}

    def get(self, key: str, default: Any = None, cast_type: type = str) -> Any:
        """Get configuration value from environment variables.

        Args:
            key: Configuration key
            default: Default value if not found
            cast_type: Type to cast the value to (str, int, bool, float)

        Returns:
            Configuration value cast to the specified type
        """
        cache_key = f"{key}:{cast_type.__name__}"
        if cache_key in self._cache:
            return self._cache[cache_key]

        value = os.getenv(key)

        if value is None:
            value = default

        if value is not None:
            try:
                if cast_type is bool:
                    if isinstance(value, str):
                        value = value.lower() in ("true", "1", "yes", "on")  # type: ignore[assignment]
                    else:
                        value = bool(value)  # type: ignore[assignment]
                elif cast_type is not str:
                    value = cast_type(value)
            except (ValueError, TypeError) as e:
                logger.warning("config_cast_failed", key=key, cast_type=cast_type.__name__, error=str(e))
                value = default

        self._cache[cache_key] = value
        return value

    def get_required(self, key: str, cast_type: type = str) -> Any:
        """Get required configuration value.

        Raises:
            ValueError: If the required configuration is not found
        """
        value = self.get(key, cast_type=cast_type)
        if value is None:
            raise ValueError(f"Required configuration '{key}' not found")
        return value

    def is_development(self) -> bool:
        """Check if running in development mode."""
        environment = self.get("ENVIRONMENT", "development").lower()
        return environment in ["development", "dev", "local"]

    def clear_cache(self):
        """Clear configuration cache."""
        self._cache.clear()


# Global configuration instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def get_env(key: str, default: Any = None, cast_type: type = str) -> Any:
    """Get environment variable with type casting."""
    return get_config().get(key, default, cast_type)


def get_data_dir() -> Path:
    """Base directory for the gallery, its index and the cache."""
    return Path(get_env("PHOTOMAP_DATA_DIR", str(DEFAULT_DATA_DIR)))


def get_gallery_dir() -> Path:
    """Directory holding exported gallery images."""
    return Path(get_env("PHOTOMAP_GALLERY_DIR", str(get_data_dir() / "gallery")))


def get_database_path() -> Path:
    """DuckDB file indexing the gallery."""
    return Path(get_env("PHOTOMAP_DATABASE_PATH", str(get_data_dir() / "media.duckdb")))


def get_cache_dir() -> Path:
    """Directory for temporary copies made while reading metadata."""
    return Path(get_env("PHOTOMAP_CACHE_DIR", str(get_data_dir() / "cache")))


def get_platform_api_level() -> int:
    """Host platform API level, used to pick the storage permission model."""
    return int(get_env("PLATFORM_API_LEVEL", DEFAULT_API_LEVEL, int))


def get_granted_permissions() -> set[str]:
    """Permissions the host has granted, as a comma separated list."""
    default = ",".join([READ_MEDIA_IMAGES, READ_EXTERNAL_STORAGE, WRITE_EXTERNAL_STORAGE])
    raw = str(get_env("GRANTED_PERMISSIONS", default))
    return {item.strip() for item in raw.split(",") if item.strip()}


def get_map_provider_scheme() -> str:
    return str(get_env("MAP_PROVIDER_SCHEME", "androidamap"))


def get_map_source_application() -> str:
    return str(get_env("MAP_SOURCE_APPLICATION", "Photo location viewer"))


def get_map_store_package() -> str:
    return str(get_env("MAP_STORE_PACKAGE", "com.autonavi.minimap"))


def get_map_web_url() -> str:
    return str(get_env("MAP_WEB_URL", "https://mobile.amap.com/"))


def get_installed_packages() -> list[str]:
    """Packages reported as installed by the local intent dispatcher."""
    raw = str(get_env("INSTALLED_PACKAGES", ""))
    return [item.strip() for item in raw.split(",") if item.strip()]
