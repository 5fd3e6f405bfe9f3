"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the
process.

Usage:
    from index_pager.core.settings import get_pagination_settings

    settings = get_pagination_settings()  # First call: loads and validates
    settings = get_pagination_settings()  # Subsequent calls: cached instance

Testing:
    In tests, clear the cache to force reload:
    get_pagination_settings.cache_clear()

    Or pass a custom instance directly:
    PageCursorIterator(fetch, page_size=8, settings=PaginationSettings(max_pages=2))
"""

from __future__ import annotations

from functools import lru_cache

from .logs import LoggingSettings
from .pagination import PaginationSettings
from .store import StoreSettings


@lru_cache(maxsize=1)
def get_pagination_settings() -> PaginationSettings:
    """Get cached pagination settings.

    Returns:
        Validated and frozen PaginationSettings instance.
    """
    return PaginationSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


@lru_cache(maxsize=1)
def get_store_settings() -> StoreSettings:
    """Get cached store settings.

    Returns:
        Validated and frozen StoreSettings instance.
    """
    return StoreSettings()


def clear_all_caches() -> None:
    """Clear every cached settings instance."""
    get_pagination_settings.cache_clear()
    get_logging_settings.cache_clear()
    get_store_settings.cache_clear()
