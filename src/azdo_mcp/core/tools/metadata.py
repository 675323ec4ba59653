from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from azdo_mcp.core.client import AzureDevOpsClient
from azdo_mcp.core.tools._collections import optional_list, segment, value_elements

DASHBOARDS_API_VERSION = "7.1-preview.3"


def _flatten_queries(nodes: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Depth-first walk of the saved query tree, folders before their children."""
    flat: List[Dict[str, Any]] = []
    for node in nodes:
        flat.append({k: v for k, v in node.items() if k != "children"})
        children = node.get("children")
        if isinstance(children, list):
            flat.extend(_flatten_queries(c for c in children if isinstance(c, dict)))
    return flat


async def _classification_nodes(
    client: AzureDevOpsClient, project: Optional[str], group: str, tool: str
) -> List[Dict[str, Any]]:
    proj = client.project_or_default(project)
    return await optional_list(
        client.get(
            f"/{segment(proj)}/_apis/wit/classificationnodes/{group}",
            params={"$depth": 1},
            tool=tool,
        ),
        key="children",
    )


async def list_work_item_types(
    client: AzureDevOpsClient, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    proj = client.project_or_default(project)
    payload = await client.get(
        f"/{segment(proj)}/_apis/wit/workitemtypes", tool="list_work_item_types"
    )
    return value_elements(payload)


async def list_work_item_categories(
    client: AzureDevOpsClient, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    proj = client.project_or_default(project)
    return await optional_list(
        client.get(
            f"/{segment(proj)}/_apis/wit/workitemtypecategories",
            tool="list_work_item_categories",
        )
    )


async def list_work_item_states(
    client: AzureDevOpsClient, project: str, work_item_type: str
) -> List[Dict[str, Any]]:
    return await optional_list(
        client.get(
            f"/{segment(project)}/_apis/wit/workitemtypes/{segment(work_item_type)}/states",
            tool="list_work_item_states",
        )
    )


async def list_work_item_fields(
    client: AzureDevOpsClient, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    proj = client.project_or_default(project)
    return await optional_list(
        client.get(f"/{segment(proj)}/_apis/wit/fields", tool="list_work_item_fields")
    )


async def list_tags(
    client: AzureDevOpsClient, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    proj = client.project_or_default(project)
    return await optional_list(
        client.get(f"/{segment(proj)}/_apis/wit/tags", tool="list_tags")
    )


async def list_queries(
    client: AzureDevOpsClient, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    """Saved queries, flattened one level below the root folders."""
    proj = client.project_or_default(project)
    payload = await client.get(
        f"/{segment(proj)}/_apis/wit/queries",
        params={"$depth": 1},
        tool="list_queries",
    )
    return _flatten_queries(value_elements(payload))


async def list_dashboards(
    client: AzureDevOpsClient, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    proj = client.project_or_default(project)
    return await optional_list(
        client.get(
            f"/{segment(proj)}/_apis/dashboard/dashboards",
            api_version=DASHBOARDS_API_VERSION,
            tool="list_dashboards",
        )
    )


async def list_iterations(
    client: AzureDevOpsClient, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    return await _classification_nodes(client, project, "Iterations", "list_iterations")


async def list_areas(
    client: AzureDevOpsClient, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    return await _classification_nodes(client, project, "Areas", "list_areas")
