from __future__ import annotations

from typing import Any, Dict, List, Optional

from azdo_mcp.core.client import AzureDevOpsClient
from azdo_mcp.core.tools._collections import value_elements


async def search_code(
    client: AzureDevOpsClient,
    search_text: str,
    project: Optional[str] = None,
    repository: Optional[str] = None,
    top: int = 5,
) -> List[Dict[str, Any]]:
    """Full-text code search; filters are only sent when a scope is known."""
    proj = project or client.default_project
    body: Dict[str, Any] = {"searchText": search_text, "$top": top}
    filters: Dict[str, List[str]] = {}
    if proj:
        filters["Project"] = [proj]
    if repository:
        filters["Repository"] = [repository]
    if filters:
        body["filters"] = filters
    payload = await client.post(
        "/_apis/search/codesearchresults",
        host="search",
        json=body,
        tool="search_code",
    )
    return value_elements(payload, "results")


async def search_work_items(
    client: AzureDevOpsClient,
    search_text: str,
    project: Optional[str] = None,
    top: int = 10,
) -> List[Dict[str, Any]]:
    proj = project or client.default_project
    body: Dict[str, Any] = {"searchText": search_text, "$top": top}
    if proj:
        body["filters"] = {"System.TeamProject": [proj]}
    payload = await client.post(
        "/_apis/search/workitemsearchresults",
        host="search",
        json=body,
        tool="search_work_items",
    )
    return value_elements(payload, "results")
