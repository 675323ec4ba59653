from __future__ import annotations

from typing import Any, Dict, List, Optional

from azdo_mcp.core.client import AzureDevOpsClient
from azdo_mcp.core.tools._collections import optional_list, segment, value_elements


async def get_builds(
    client: AzureDevOpsClient,
    definition_id: Optional[int] = None,
    top: int = 10,
    project: Optional[str] = None,
) -> List[Dict[str, Any]]:
    proj = client.project_or_default(project)
    params: Dict[str, Any] = {"$top": top}
    if definition_id:
        params["definitions"] = definition_id
    payload = await client.get(
        f"/{segment(proj)}/_apis/build/builds", params=params, tool="get_builds"
    )
    return value_elements(payload)


async def list_build_definitions(
    client: AzureDevOpsClient, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    proj = client.project_or_default(project)
    payload = await client.get(
        f"/{segment(proj)}/_apis/build/definitions", tool="list_build_definitions"
    )
    return value_elements(payload)


async def list_pipelines(
    client: AzureDevOpsClient, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    proj = client.project_or_default(project)
    return await optional_list(
        client.get(f"/{segment(proj)}/_apis/pipelines", tool="list_pipelines")
    )


async def get_releases(
    client: AzureDevOpsClient, top: int = 10, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    proj = client.project_or_default(project)
    payload = await client.get(
        f"/{segment(proj)}/_apis/release/releases",
        host="release",
        params={"$top": top},
        tool="get_releases",
    )
    return value_elements(payload)


async def list_release_definitions(
    client: AzureDevOpsClient, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    proj = client.project_or_default(project)
    return await optional_list(
        client.get(
            f"/{segment(proj)}/_apis/release/definitions",
            host="release",
            tool="list_release_definitions",
        )
    )


async def list_variable_groups(
    client: AzureDevOpsClient, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    proj = client.project_or_default(project)
    return await optional_list(
        client.get(
            f"/{segment(proj)}/_apis/distributedtask/variablegroups",
            tool="list_variable_groups",
        )
    )


async def list_service_endpoints(
    client: AzureDevOpsClient, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    proj = client.project_or_default(project)
    return await optional_list(
        client.get(
            f"/{segment(proj)}/_apis/serviceendpoint/endpoints",
            tool="list_service_endpoints",
        )
    )
