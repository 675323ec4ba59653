from __future__ import annotations

from typing import Any, Dict, List, Optional

from azdo_mcp.core.client import AzureDevOpsClient
from azdo_mcp.core.records import dig
from azdo_mcp.core.tools._collections import segment, value_elements


async def list_projects(client: AzureDevOpsClient) -> List[Dict[str, Any]]:
    payload = await client.get("/_apis/projects", tool="list_projects")
    return value_elements(payload)


async def list_project_teams(
    client: AzureDevOpsClient,
    project: str,
    mine: Optional[bool] = None,
    top: int = 100,
    skip: int = 0,
) -> List[Dict[str, Any]]:
    params: Dict[str, Any] = {"$top": top, "$skip": skip}
    if mine is not None:
        params["$mine"] = "true" if mine else "false"
    payload = await client.get(
        f"/_apis/projects/{segment(project)}/teams",
        params=params,
        tool="list_project_teams",
    )
    return value_elements(payload)


async def get_identity_ids(
    client: AzureDevOpsClient, search_filter: str
) -> List[Dict[str, Any]]:
    """Look identities up by unique name, display name or email (identity host)."""
    payload = await client.get(
        "/_apis/identities",
        host="identity",
        params={"searchFilter": "General", "filterValue": search_filter},
        tool="get_identity_ids",
    )
    return value_elements(payload)


async def get_current_user(client: AzureDevOpsClient) -> Dict[str, Any]:
    """
    Resolve the identity behind the PAT from connectionData.
    The authenticated user record is reshaped to id/displayName/uniqueName/email.
    """
    payload = await client.get(
        "/_apis/connectionData", api_version=None, tool="get_current_user"
    )
    user = payload.get("authenticatedUser") or {}
    unique_name = dig(user, "properties", "Account", "$value", default=None)
    email = dig(user, "properties", "Mail", "$value", default=None)
    return {
        "id": user.get("id"),
        "displayName": user.get("providerDisplayName") or user.get("customDisplayName"),
        "uniqueName": unique_name,
        "email": email,
    }
