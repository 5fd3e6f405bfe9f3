"""Pagination settings for index traversal.

Centralised defaults for page sizes and walk limits, so every iterator
caps its requests the same way.

Environment variables use PAGINATION_ prefix.
Example: PAGINATION_DEFAULT_PAGE_SIZE=64, PAGINATION_MAX_PAGE_SIZE=100000
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaginationSettings(BaseSettings):
    """Pagination configuration settings.

    Attributes:
        default_page_size: Page size used when a caller does not pass one.
        max_page_size: Largest page size the store accepts; larger requests
            are capped to this value.
        max_pages: Optional ceiling on the number of pages one traversal may
            fetch. None means unlimited.

    Example:
        settings = PaginationSettings()
        size = min(requested_size, settings.max_page_size)
    """

    default_page_size: int = Field(
        default=64,
        ge=1,
        le=100_000,
        description="Default page size when none is given",
    )
    max_page_size: int = Field(
        default=100_000,
        ge=1,
        le=100_000,
        description="Maximum page size accepted by the store (hard limit)",
    )
    max_pages: int | None = Field(
        default=None,
        ge=1,
        description="Maximum number of pages a single traversal may fetch",
    )

    model_config = SettingsConfigDict(
        env_prefix="PAGINATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )
