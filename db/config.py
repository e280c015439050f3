from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


def to_async_database_url(url: str | None) -> str | None:
    """Point plain postgres URLs at the asyncpg driver."""
    if not url:
        return url
    if url.startswith("postgres://"):
        return "postgresql+asyncpg://" + url.removeprefix("postgres://")
    if url.startswith("postgresql://"):
        return "postgresql+asyncpg://" + url.removeprefix("postgresql://")
    return url


class Settings(BaseSettings):
    # Database Settings
    database_url: str | None = None
    old_database_url: str | None = None

    # Run Mode
    profile_limit: int | None = Field(default=None, gt=0)
    dry_run: bool = False
    force: bool = False
    stats_only: bool = False
    logging_level: str = "INFO"

    # Batch Sizes
    batch_size: int = Field(default=500, gt=0)
    profile_query_batch: int = Field(default=500, gt=0)
    match_query_batch: int = Field(default=100, gt=0)
    message_query_batch: int = Field(default=500, gt=0)
    media_query_batch: int = Field(default=500, gt=0)
    usage_query_batch: int = Field(default=50, gt=0)
    file_upload_batch: int = Field(default=10, gt=0)
    media_fetch_batch: int = Field(default=50, gt=0)
    media_insert_batch: int = Field(default=200, gt=0)

    # Cohort Statistics
    cohort_min_profiles: int = Field(default=5, gt=0)
    cohort_stats_years: list[int] = Field(default_factory=lambda: list(range(2025, 2017, -1)))

    # Object Storage (original uploaded files)
    blob_storage_backend: Literal["local", "s3"] = "local"
    blob_local_dir: str = "data/blobs"
    blob_public_base_url: str | None = None
    large_file_warning_mb: int = 50
    s3_endpoint_url: str | None = None
    s3_access_key_id: str | None = None
    s3_secret_access_key: str | None = None
    s3_bucket_name: str | None = None
    s3_region: str = "auto"

    @field_validator("database_url", "old_database_url")
    @classmethod
    def normalize_database_url(cls, value: str | None) -> str | None:
        return to_async_database_url(value)

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
