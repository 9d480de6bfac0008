"""
Guards against deleting categories or tags that articles still point at.
"""

from __future__ import annotations

from typing import Any, Mapping

from knowledge_base.errors import ConflictError


def check_removed_references(
    kind: str,
    current: Mapping[str, Any],
    proposed: Mapping[str, Any],
    usage: Mapping[str, int],
) -> None:
    """
    Raise ConflictError if an id stored in ``current`` is missing from
    ``proposed`` while articles still reference it. Dangling references that
    already existed are ignored.
    """
    removed = [key for key in current if key not in proposed]
    blocked = [(key, usage[key]) for key in removed if usage.get(key)]
    if not blocked:
        return
    details = ", ".join(f"{key} ({count} article(s))" for key, count in blocked)
    raise ConflictError(f"Cannot delete {kind} still in use: {details}")
