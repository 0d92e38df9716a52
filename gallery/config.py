"""Runtime configuration based on environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import AnyHttpUrl, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SourceSettings(BaseModel):
    base_url: AnyHttpUrl = Field(
        default="http://localhost:3001/api/images",
        description="Paginated image search endpoint.",
    )
    page_size: int = Field(default=8, ge=1, le=500)
    fallback_query: str = Field(
        default="nature",
        min_length=1,
        description="Query sent to the server when the search term is empty.",
    )
    request_timeout_seconds: float = Field(default=10, gt=0, le=120)


class CacheSettings(BaseModel):
    stale_seconds: float = Field(default=3600, gt=0)
    retry_attempts: int = Field(default=1, ge=0, le=5)
    retry_delay_seconds: float = Field(default=0.5, ge=0)
    max_retained_terms: int = Field(default=16, ge=1)


class ScrollSettings(BaseModel):
    debounce_seconds: float = Field(default=0.2, ge=0)
    end_margin: int = Field(default=200, ge=0, description="Sentinel root margin in pixels.")


class SearchSettings(BaseModel):
    debounce_seconds: float = Field(default=0.5, ge=0)


class ViewportSettings(BaseModel):
    height: int = Field(default=600, ge=1)
    overscan_count: int = Field(default=2, ge=0)


class GallerySettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GALLERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__"
    )

    environment: str = "dev"
    log_level: str = "INFO"
    log_json: bool = True

    source: SourceSettings = Field(default_factory=SourceSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    scroll: ScrollSettings = Field(default_factory=ScrollSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    viewport: ViewportSettings = Field(default_factory=ViewportSettings)


@lru_cache
def get_settings() -> GallerySettings:
    """Return cached settings instance."""

    return GallerySettings()


__all__ = [
    "CacheSettings",
    "GallerySettings",
    "ScrollSettings",
    "SearchSettings",
    "SourceSettings",
    "ViewportSettings",
    "get_settings",
]
