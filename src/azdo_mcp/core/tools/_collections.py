"""
Shared helpers for working with Azure DevOps collection payloads.
"""

from typing import Any, Awaitable, Dict, List
from urllib.parse import quote

from azdo_mcp.core.client import AzureDevOpsNotFoundError


def value_elements(payload: Dict[str, Any], key: str = "value") -> List[Dict[str, Any]]:
    """
    Extract the element list from a `{"count": n, "value": [...]}` payload.
    Raises ValueError if the list is present but malformed.
    """
    elements = payload.get(key)
    if elements is None:
        return []
    if not isinstance(elements, list):
        raise ValueError(f"Expected '{key}' to be a list.")
    return [e for e in elements if isinstance(e, dict)]


async def optional_list(
    pending: Awaitable[Dict[str, Any]], key: str = "value"
) -> List[Dict[str, Any]]:
    """
    Await a collection request for an optionally enabled feature.
    A 404 means the feature or configuration is absent, which reads as empty.
    """
    try:
        payload = await pending
    except AzureDevOpsNotFoundError:
        return []
    return value_elements(payload, key)


def segment(value: Any) -> str:
    """Percent-encode one URL path segment (project, team, board names may hold spaces)."""
    return quote(str(value), safe="")
