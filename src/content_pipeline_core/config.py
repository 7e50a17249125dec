from __future__ import annotations

from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    pipeline_version: str = Field(default="v1", alias="PIPELINE_VERSION")

    content_dir: str = Field(default="data/blog", alias="CONTENT_DIR")
    default_authors: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["default"], alias="DEFAULT_AUTHORS")
    link_prefix: str = Field(default="/blog/", alias="LINK_PREFIX")
    posts_per_page: int = Field(default=5, alias="POSTS_PER_PAGE")
    build_workers: int = Field(default=4, alias="BUILD_WORKERS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    s3_endpoint: str | None = Field(default=None, alias="S3_ENDPOINT")
    s3_bucket: str | None = Field(default=None, alias="S3_BUCKET")
    s3_prefix: str = Field(default="", alias="S3_PREFIX")
    s3_access_key: str | None = Field(default=None, alias="S3_ACCESS_KEY")
    s3_secret_key: str | None = Field(default=None, alias="S3_SECRET_KEY")

    content_api_url: str | None = Field(default=None, alias="CONTENT_API_URL")

    nats_url: str | None = Field(default=None, alias="NATS_URL")
    nats_subject: str = Field(default="content.built", alias="NATS_SUBJECT")

    @field_validator("default_authors", mode="before")
    @classmethod
    def _split_authors(cls, value: object) -> object:
        # Env values arrive as "alice, bob".
        if isinstance(value, str):
            return [a.strip() for a in value.split(",") if a.strip()]
        return value

    @field_validator("build_workers", "posts_per_page")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be >= 1")
        return value

    @field_validator("link_prefix")
    @classmethod
    def _slash_wrapped(cls, value: str) -> str:
        return "/" + value.strip().strip("/") + "/" if value.strip("/ ") else "/"


def load_settings() -> Settings:
    return Settings()
