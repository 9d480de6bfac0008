"""
Blob store abstraction: named JSON text documents under string keys.

Backends exist for Redis, S3-compatible object storage (Tencent COS),
any SQLAlchemy database, and an in-memory store for tests/local runs.
No backend retries or offers atomicity across keys.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Optional, Protocol

import boto3
import redis
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from redis import exceptions as redis_exceptions
from sqlalchemy import Column, Float, String, Text, create_engine
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from knowledge_base.errors import StoreError

logger = logging.getLogger(__name__)

Base = declarative_base()


class BlobStore(Protocol):
    """Defines the operations the API needs from the key-value store."""

    def get(self, key: str) -> Optional[str]:
        ...

    def put(self, key: str, text: str) -> None:
        ...


@dataclass
class InMemoryBlobStore:
    """Test double for the key-value store."""

    blobs: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def put(self, key: str, text: str) -> None:
        self.blobs[key] = text

    def reset(self) -> None:
        self.blobs.clear()


@dataclass
class RedisBlobStore:
    """Redis-backed store using plain string GET/SET."""

    url: str
    key_prefix: str = "kb:"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        try:
            value = self.client.get(self._key(key))
        except redis_exceptions.RedisError as exc:
            raise StoreError(key, f"Redis get failed for {key}: {exc}") from exc
        if value is None:
            return None
        return value.decode("utf-8")

    def put(self, key: str, text: str) -> None:
        try:
            self.client.set(self._key(key), text.encode("utf-8"))
        except redis_exceptions.RedisError as exc:
            raise StoreError(key, f"Redis put failed for {key}: {exc}") from exc


@dataclass
class S3BlobStore:
    """
    S3-compatible store (Tencent COS), one object per key.
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str
    prefix: str = "kb/"

    def __post_init__(self):
        # Use virtual-hosted style addressing to satisfy COS requirements.
        config = Config(
            s3={"addressing_style": "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=config,
        )

    def _path(self, key: str) -> str:
        return f"{self.prefix}{key}.json"

    def get(self, key: str) -> Optional[str]:
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=self._path(key))
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in ("NoSuchKey", "404", "NotFound"):
                return None
            raise StoreError(key, f"Object get failed for {key}: {exc}") from exc
        except BotoCoreError as exc:
            raise StoreError(key, f"Object get failed for {key}: {exc}") from exc
        return response["Body"].read().decode("utf-8")

    def put(self, key: str, text: str) -> None:
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=self._path(key),
                Body=text.encode("utf-8"),
                ContentType="application/json",
            )
        except (ClientError, BotoCoreError) as exc:
            raise StoreError(key, f"Object put failed for {key}: {exc}") from exc


class BlobRow(Base):
    __tablename__ = "kv_blobs"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(Float, nullable=False)


class SqlBlobStore:
    """
    SQLAlchemy-backed store. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlBlobStore")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def get(self, key: str) -> Optional[str]:
        try:
            with self.Session() as session:
                row = session.get(BlobRow, key)
                return row.value if row else None
        except SQLAlchemyError as exc:
            raise StoreError(key, f"Database get failed for {key}: {exc}") from exc

    def _upsert(self, key: str, text: str):
        """Single-statement insert-or-replace, or None when the dialect has none."""
        values = {"key": key, "value": text, "updated_at": time.time()}
        dialect = self.engine.dialect.name
        if dialect == "postgresql":
            insert = postgresql.insert
        elif dialect == "sqlite":
            insert = sqlite.insert
        else:
            return None
        stmt = insert(BlobRow).values(**values)
        return stmt.on_conflict_do_update(
            index_elements=[BlobRow.key],
            set_={"value": stmt.excluded.value, "updated_at": stmt.excluded.updated_at},
        )

    def put(self, key: str, text: str) -> None:
        try:
            with self.Session() as session:
                stmt = self._upsert(key, text)
                if stmt is not None:
                    session.execute(stmt)
                else:
                    session.merge(BlobRow(key=key, value=text, updated_at=time.time()))
                session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(key, f"Database put failed for {key}: {exc}") from exc
