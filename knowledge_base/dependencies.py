"""
Dependency wiring for the FastAPI app.

Settings and the store are resolved once in ``create_app`` and frozen into an
``AppContext`` kept on ``app.state``; handlers reach it through
``get_context``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Request

from knowledge_base.auth import AdminAuthorizer
from knowledge_base.config import STORE_BACKENDS, Settings
from knowledge_base.repository import CollectionRepository
from knowledge_base.storage import (
    BlobStore,
    InMemoryBlobStore,
    RedisBlobStore,
    S3BlobStore,
    SqlBlobStore,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppContext:
    settings: Settings
    store: BlobStore
    backend: str
    kv_configured: bool
    repository: CollectionRepository
    authorizer: AdminAuthorizer


def build_store(settings: Settings) -> tuple[BlobStore, str]:
    """Return the configured store and its backend name."""
    backend = (settings.kb_store_backend or "memory").lower()
    if backend not in STORE_BACKENDS:
        raise ValueError(
            f"Unknown KB_STORE_BACKEND {backend!r}; expected one of {STORE_BACKENDS}"
        )
    if backend == "redis":
        if not settings.redis_url:
            raise ValueError("REDIS_URL is required for the redis store backend")
        return RedisBlobStore(url=settings.redis_url, key_prefix=settings.kb_redis_prefix), backend
    if backend == "s3":
        if not settings.cos_bucket:
            raise ValueError("COS_BUCKET is required for the s3 store backend")
        store = S3BlobStore(
            bucket=settings.cos_bucket,
            region=settings.cos_region or "",
            endpoint=settings.cos_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
            prefix=settings.kb_object_prefix,
        )
        return store, backend
    if backend == "sql":
        return SqlBlobStore(settings.database_url or ""), backend
    return InMemoryBlobStore(), backend


def build_context(settings: Settings, store: Optional[BlobStore] = None) -> AppContext:
    if store is None:
        store, backend = build_store(settings)
        kv_configured = settings.kb_store_backend is not None
    else:
        backend = type(store).__name__
        kv_configured = True
    return AppContext(
        settings=settings,
        store=store,
        backend=backend,
        kv_configured=kv_configured,
        repository=CollectionRepository(store),
        authorizer=AdminAuthorizer(settings.admin_password),
    )


def get_context(request: Request) -> AppContext:
    return request.app.state.context


@dataclass(frozen=True)
class AdminBody:
    """Admin request body as raw JSON, before any schema validation."""

    payload: Any = None

    @property
    def password(self) -> Any:
        if isinstance(self.payload, dict):
            return self.payload.get("password")
        return None


async def read_admin_body(request: Request) -> AdminBody:
    # Parsed loosely so the password check can run before validation.
    raw = await request.body()
    if not raw:
        return AdminBody()
    try:
        return AdminBody(payload=json.loads(raw))
    except ValueError as exc:
        logger.warning("Admin request to %s has a non-JSON body: %s", request.url.path, exc)
        return AdminBody()
