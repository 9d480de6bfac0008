"""
Collection access on top of a blob store: fail-soft reads, fail-loud writes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from knowledge_base import codec
from knowledge_base.errors import StoreError
from knowledge_base.storage import BlobStore

logger = logging.getLogger(__name__)

WRITTEN = "written"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass
class Collections:
    articles: List[Any] = field(default_factory=list)
    categories: Dict[str, Any] = field(default_factory=dict)
    tags: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict:
        return {
            "articles": self.articles,
            "categories": self.categories,
            "tags": self.tags,
        }


@dataclass
class ImportResult:
    results: Dict[str, str]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CollectionRepository:
    def __init__(self, store: BlobStore):
        self.store = store

    def read_raw(self, key: str) -> Optional[str]:
        try:
            return self.store.get(key)
        except StoreError as exc:
            # A failed read is treated as an absent document.
            logger.error("Store read failed for %s, treating as absent: %s", key, exc)
            return None

    def read(self, key: str) -> Any:
        return codec.decode(key, self.read_raw(key))

    def read_all(self) -> Collections:
        return Collections(
            articles=self.read(codec.ARTICLES_KEY),
            categories=self.read(codec.CATEGORIES_KEY),
            tags=self.read(codec.TAGS_KEY),
        )

    def read_published(self) -> Collections:
        collections = self.read_all()
        collections.articles = codec.filter_published(collections.articles)
        return collections

    def write(self, key: str, value: Any) -> None:
        text = codec.encode(value)
        self.store.put(key, text)
        logger.info("Wrote %s document (%d bytes)", key, len(text))

    def apply_import(self, data: Mapping[str, Any]) -> ImportResult:
        """
        Overwrite each collection present in ``data``, one put at a time.

        Omitted (or null) collections are left untouched. A failed put stops
        the import; collections written before it stay written.
        """
        results = {key: SKIPPED for key in codec.COLLECTION_KEYS}
        for key in codec.COLLECTION_KEYS:
            value = data.get(key)
            if value is None:
                continue
            try:
                self.write(key, value)
            except StoreError as exc:
                results[key] = FAILED
                logger.error("Import stopped at %s: %s", key, exc)
                return ImportResult(results=results, error=str(exc))
            results[key] = WRITTEN
        logger.info("Import applied: %s", results)
        return ImportResult(results=results)
