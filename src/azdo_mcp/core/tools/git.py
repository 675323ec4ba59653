from __future__ import annotations

from typing import Any, Dict, List, Optional

from azdo_mcp.core.client import AzureDevOpsClient
from azdo_mcp.core.records import strip_ref_prefix
from azdo_mcp.core.tools._collections import segment, value_elements

PULL_REQUEST_KEYS = (
    "pullRequestId",
    "repository",
    "title",
    "description",
    "createdBy",
    "creationDate",
    "status",
    "sourceRefName",
    "targetRefName",
    "isDraft",
    "url",
)


def _repo_path(
    client: AzureDevOpsClient, project: Optional[str], repository_id: str
) -> str:
    proj = client.project_or_default(project)
    return f"/{segment(proj)}/_apis/git/repositories/{segment(repository_id)}"


def _pull_request_summary(pr: Dict[str, Any]) -> Dict[str, Any]:
    return {key: pr.get(key) for key in PULL_REQUEST_KEYS}


def _head_ref(branch: str) -> str:
    return branch if branch.startswith("refs/") else f"refs/heads/{branch}"


async def list_repositories(
    client: AzureDevOpsClient, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    proj = client.project_or_default(project)
    payload = await client.get(
        f"/{segment(proj)}/_apis/git/repositories", tool="list_repositories"
    )
    return value_elements(payload)


async def list_branches(
    client: AzureDevOpsClient, repository_id: str, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    payload = await client.get(
        _repo_path(client, project, repository_id) + "/refs",
        params={"filter": "heads"},
        tool="list_branches",
    )
    return [
        {
            "name": strip_ref_prefix(ref.get("name")),
            "objectId": ref.get("objectId"),
            "creator": ref.get("creator"),
        }
        for ref in value_elements(payload)
    ]


async def list_pull_requests(
    client: AzureDevOpsClient,
    repository_id: Optional[str] = None,
    project: Optional[str] = None,
    top: int = 100,
    status: str = "active",
) -> List[Dict[str, Any]]:
    proj = client.project_or_default(project)
    params: Dict[str, Any] = {"$top": top, "searchCriteria.status": status}
    if repository_id:
        params["searchCriteria.repositoryId"] = repository_id
    payload = await client.get(
        f"/{segment(proj)}/_apis/git/pullrequests",
        params=params,
        tool="list_pull_requests",
    )
    return [_pull_request_summary(pr) for pr in value_elements(payload)]


async def get_pull_request(
    client: AzureDevOpsClient,
    repository_id: str,
    pull_request_id: int,
    project: Optional[str] = None,
) -> Dict[str, Any]:
    payload = await client.get(
        _repo_path(client, project, repository_id) + f"/pullrequests/{pull_request_id}",
        tool="get_pull_request",
    )
    return _pull_request_summary(payload)


async def create_pull_request(
    client: AzureDevOpsClient,
    repository_id: str,
    source_branch: str,
    target_branch: str,
    title: str,
    description: Optional[str] = None,
    project: Optional[str] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "sourceRefName": _head_ref(source_branch),
        "targetRefName": _head_ref(target_branch),
        "title": title,
    }
    if description:
        body["description"] = description
    return await client.post(
        _repo_path(client, project, repository_id) + "/pullrequests",
        json=body,
        tool="create_pull_request",
    )


async def list_commits(
    client: AzureDevOpsClient,
    repository_id: str,
    project: Optional[str] = None,
    top: int = 10,
) -> List[Dict[str, Any]]:
    payload = await client.get(
        _repo_path(client, project, repository_id) + "/commits",
        params={"searchCriteria.$top": top},
        tool="list_commits",
    )
    return value_elements(payload)


async def get_file_content(
    client: AzureDevOpsClient,
    repository_id: str,
    path: str,
    project: Optional[str] = None,
) -> str:
    return await client.get_text(
        _repo_path(client, project, repository_id) + "/items",
        params={"path": path, "includeContent": "true"},
        tool="get_file_content",
    )
