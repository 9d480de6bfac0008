"""
Configuration and settings for the knowledge base backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

STORE_BACKENDS = ("memory", "redis", "s3", "sql")


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO", env="LOG_LEVEL")

    # Shared admin secret. Unset means every admin request is rejected.
    admin_password: Optional[str] = Field(default=None, env="ADMIN_PASSWORD")

    # Key-value store binding. Unset falls back to an in-memory store.
    kb_store_backend: Optional[str] = Field(default=None, env="KB_STORE_BACKEND")

    # Redis
    redis_url: Optional[str] = Field(default=None, env="REDIS_URL")
    kb_redis_prefix: str = Field(default="kb:", env="KB_REDIS_PREFIX")

    # S3-compatible storage (Tencent COS)
    cos_endpoint: Optional[str] = Field(default=None, env="COS_ENDPOINT")
    cos_region: Optional[str] = Field(default=None, env="COS_REGION")
    cos_bucket: Optional[str] = Field(default=None, env="COS_BUCKET")
    aws_access_key_id: Optional[str] = Field(
        default=None, env="AWS_ACCESS_KEY_ID"
    )
    aws_secret_access_key: Optional[str] = Field(
        default=None, env="AWS_SECRET_ACCESS_KEY"
    )
    kb_object_prefix: str = Field(default="kb/", env="KB_OBJECT_PREFIX")

    # SQL (any SQLAlchemy URL)
    database_url: Optional[str] = Field(default=None, env="DATABASE_URL")

    # Reject category/tag writes that drop ids still used by articles.
    kb_enforce_references: bool = Field(default=True, env="KB_ENFORCE_REFERENCES")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
