"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="ReelScout", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    tmdb_api_key: str | None = Field(default=None, alias="TMDB_API_KEY")
    tmdb_api_url: HttpUrl = Field(
        default="https://api.themoviedb.org/3", alias="TMDB_API_URL"
    )
    tmdb_image_base_url: HttpUrl = Field(
        default="https://image.tmdb.org/t/p", alias="TMDB_IMAGE_BASE_URL"
    )
    tmdb_language: str = Field(default="en-US", alias="TMDB_LANGUAGE")
    image_placeholder_url: str = Field(
        default="https://via.placeholder.com/185x278?text=No+Image",
        alias="IMAGE_PLACEHOLDER_URL",
    )

    youtube_api_key: str | None = Field(default=None, alias="YOUTUBE_API_KEY")
    youtube_api_url: HttpUrl = Field(
        default="https://www.googleapis.com/youtube/v3", alias="YOUTUBE_API_URL"
    )
    video_search_max_results: int = Field(
        default=5, alias="VIDEO_SEARCH_MAX_RESULTS", ge=1, le=50
    )
    video_min_duration_seconds: int = Field(
        default=3_600, alias="VIDEO_MIN_DURATION_SECONDS", ge=60
    )
    video_query_suffix: str = Field(default="full movie", alias="VIDEO_QUERY_SUFFIX")
    video_prefer_title_match: bool = Field(
        default=True, alias="VIDEO_PREFER_TITLE_MATCH"
    )
    trailer_site: str = Field(default="YouTube", alias="TRAILER_SITE")

    access_token: str | None = Field(default=None, alias="ACCESS_TOKEN")

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("tmdb_api_key", "youtube_api_key", "access_token", mode="before")
    @classmethod
    def _blank_as_missing(cls, value: object) -> object:
        """Treat empty credential strings as unset."""

        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("video_query_suffix", "trailer_site", mode="before")
    @classmethod
    def _strip_text(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @property
    def image_base_url(self) -> str:
        """Return the image CDN root without a trailing slash."""

        return str(self.tmdb_image_base_url).rstrip("/")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
