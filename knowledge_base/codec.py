"""
JSON codec for the three stored collections.

Reads normalize shape (articles always come back as a list); writes store
exactly what the caller sent.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

ARTICLES_KEY = "articles"
CATEGORIES_KEY = "categories"
TAGS_KEY = "tags"
COLLECTION_KEYS = (ARTICLES_KEY, CATEGORIES_KEY, TAGS_KEY)

Record = Dict[str, Any]


def _parse(key: str, text: Optional[str]) -> Any:
    if text is None:
        return None
    try:
        return json.loads(text)
    except (TypeError, ValueError) as exc:
        logger.warning("Stored %s document is not valid JSON, using empty: %s", key, exc)
        return None


def normalize_articles(value: Any) -> List[Any]:
    """Return articles as a list, taking a mapping's values in order."""
    if isinstance(value, list):
        return list(value)
    if isinstance(value, dict):
        return list(value.values())
    return []


def decode_articles(text: Optional[str]) -> List[Any]:
    parsed = _parse(ARTICLES_KEY, text)
    if parsed is not None and not isinstance(parsed, (list, dict)):
        logger.warning(
            "Stored articles document has unexpected type %s, using empty",
            type(parsed).__name__,
        )
    return normalize_articles(parsed)


def decode_mapping(key: str, text: Optional[str]) -> Dict[str, Any]:
    parsed = _parse(key, text)
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        logger.warning(
            "Stored %s document has unexpected type %s, using empty",
            key,
            type(parsed).__name__,
        )
        return {}
    return parsed


def decode(key: str, text: Optional[str]) -> Any:
    if key == ARTICLES_KEY:
        return decode_articles(text)
    return decode_mapping(key, text)


def encode(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def is_published(article: Any) -> bool:
    return isinstance(article, dict) and article.get("published") is True


def filter_published(articles: Iterable[Any]) -> List[Any]:
    return [article for article in articles if is_published(article)]


@dataclass
class ArticleReferences:
    """Category and tag ids used by a set of article records."""

    records: List[Record] = field(default_factory=list)

    @classmethod
    def from_articles(cls, articles: Iterable[Any]) -> "ArticleReferences":
        return cls(records=[a for a in articles if isinstance(a, dict)])

    def category_usage(self) -> Dict[str, int]:
        usage: Dict[str, int] = {}
        for article in self.records:
            category_id = article.get("categoryId")
            if isinstance(category_id, str) and category_id:
                usage[category_id] = usage.get(category_id, 0) + 1
        return usage

    def tag_usage(self) -> Dict[str, int]:
        usage: Dict[str, int] = {}
        for article in self.records:
            tag_ids = article.get("tagIds") or []
            if not isinstance(tag_ids, list):
                continue
            for tag_id in set(t for t in tag_ids if isinstance(t, str)):
                usage[tag_id] = usage.get(tag_id, 0) + 1
        return usage
