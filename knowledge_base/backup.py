"""
Export bundle helpers shared by the admin route and the operator CLI.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from knowledge_base import codec
from knowledge_base.repository import CollectionRepository


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def export_bundle(repository: CollectionRepository) -> Dict[str, Any]:
    bundle = repository.read_all().as_dict()
    bundle["exportDate"] = now_iso()
    return bundle


def load_bundle(path: Path) -> Dict[str, Any]:
    """
    Read an export file. Accepts either the bare bundle or the full
    ``{"success": true, "data": {...}}`` export response.
    """
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    if isinstance(payload.get("data"), dict):
        payload = payload["data"]
    return {key: payload.get(key) for key in codec.COLLECTION_KEYS}
