"""Settings for the fetch adapters used by the CLI lessons.

Environment variables use STORE_ prefix.
Example: STORE_DATABASE_URL=sqlite:///customers.db, STORE_SEED_COUNT=50
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    """Store backend configuration.

    Attributes:
        database_url: SQLAlchemy URL used by the SQL backend.
        echo: Echo emitted SQL statements.
        seed_count: Number of customers created when a lesson store is seeded.
    """

    database_url: str = Field(
        default="sqlite:///:memory:",
        min_length=1,
        description="SQLAlchemy database URL for the SQL backend",
    )
    echo: bool = Field(
        default=False,
        description="Echo SQL statements to the log",
    )
    seed_count: int = Field(
        default=20,
        ge=0,
        le=100_000,
        description="Customers to create when seeding a lesson store",
    )

    model_config = SettingsConfigDict(
        env_prefix="STORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )
