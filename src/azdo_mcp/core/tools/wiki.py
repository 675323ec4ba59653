from __future__ import annotations

from typing import Any, Dict, List, Optional

from azdo_mcp.core.client import AzureDevOpsClient
from azdo_mcp.core.tools._collections import segment, value_elements


async def list_wikis(
    client: AzureDevOpsClient, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    proj = client.project_or_default(project)
    payload = await client.get(f"/{segment(proj)}/_apis/wiki/wikis", tool="list_wikis")
    return value_elements(payload)


async def get_wiki_page(
    client: AzureDevOpsClient,
    wiki_identifier: str,
    project: Optional[str] = None,
    path: str = "/",
) -> str:
    """Return the Markdown content of one wiki page ("" for an empty page)."""
    proj = client.project_or_default(project)
    payload = await client.get(
        f"/{segment(proj)}/_apis/wiki/wikis/{segment(wiki_identifier)}/pages",
        params={"path": path or "/", "includeContent": "true"},
        tool="get_wiki_page",
    )
    return payload.get("content") or ""
