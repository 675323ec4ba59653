"""
Helpers for reading loosely shaped Azure DevOps JSON records.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


def dig(record: Any, *path: Any, default: Any = "") -> Any:
    """
    Walk nested dicts/lists by key or index.
    Returns `default` as soon as a level is missing or has the wrong shape.

    >>> dig({"fields": {"System.Title": "x"}}, "fields", "System.Title")
    'x'
    >>> dig({}, "fields", "System.Title")
    ''
    """
    current = record
    for key in path:
        if isinstance(current, dict):
            if key not in current:
                return default
            current = current[key]
        elif isinstance(current, list) and isinstance(key, int):
            if key >= len(current) or key < -len(current):
                return default
            current = current[key]
        else:
            return default
    return default if current is None else current


def field(record: Any, name: str, *rest: Any) -> Any:
    """Shorthand for a work item field, e.g. field(wi, "System.AssignedTo", "displayName")."""
    return dig(record, "fields", name, *rest)


def strip_ref_prefix(name: Optional[str], prefix: str = "refs/heads/") -> str:
    name = name or ""
    return name[len(prefix):] if name.startswith(prefix) else name


def ids_from_wiql(payload: Dict[str, Any]) -> List[int]:
    """Collect work item ids from a WIQL result, in result order.

    Flat queries list `workItems`; link queries list `workItemRelations`
    whose targets may repeat.
    """
    ids: List[int] = []
    for item in payload.get("workItems") or []:
        if isinstance(item, dict) and item.get("id") is not None:
            ids.append(item["id"])
    for relation in payload.get("workItemRelations") or []:
        target = dig(relation, "target", "id", default=None)
        if target is not None and target not in ids:
            ids.append(target)
    return ids


__all__ = ["dig", "field", "ids_from_wiql", "strip_ref_prefix"]
