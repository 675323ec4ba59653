from __future__ import annotations

import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from azdo_mcp.core.client import AzureDevOpsClient
from azdo_mcp.core.records import dig, ids_from_wiql
from azdo_mcp.core.tools._collections import segment, value_elements

JSON_PATCH = "application/json-patch+json"
COMMENTS_API_VERSION = "7.1-preview.4"
# The workitems batch endpoint rejects more ids than this in one request
MAX_BATCH_IDS = 200

_GUID_RE = re.compile(r"^[0-9a-fA-F]{8}-?([0-9a-fA-F]{4}-?){3}[0-9a-fA-F]{12}$")


def _patch_document(
    fields: Dict[str, Any], comment: Optional[str] = None
) -> List[Dict[str, Any]]:
    ops = [
        {"op": "add", "path": f"/fields/{name}", "value": value}
        for name, value in fields.items()
    ]
    if comment:
        ops.append({"op": "add", "path": "/fields/System.History", "value": comment})
    return ops


def _work_item_path(
    client: AzureDevOpsClient, project: Optional[str], suffix: str = ""
) -> str:
    return f"/{segment(client.project_or_default(project))}/_apis/wit/workitems{suffix}"


async def get_work_items_by_ids(
    client: AzureDevOpsClient, ids: List[int], project: Optional[str] = None
) -> List[Dict[str, Any]]:
    if not ids:
        return []
    items: List[Dict[str, Any]] = []
    for start in range(0, len(ids), MAX_BATCH_IDS):
        chunk = ids[start:start + MAX_BATCH_IDS]
        payload = await client.get(
            _work_item_path(client, project),
            params={"ids": ",".join(str(i) for i in chunk)},
            tool="get_work_items_by_ids",
        )
        items.extend(value_elements(payload))
    return items


async def query_work_items(
    client: AzureDevOpsClient, wiql: str, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    """
    Run a WIQL query: the query yields ids only, a second call fetches the
    work items in result order. No ids means no second call.
    The workitems endpoint takes at most MAX_BATCH_IDS ids per request, so a
    longer result is fetched in consecutive batches of that size.
    """
    proj = client.project_or_default(project)
    refs = await client.post(
        f"/{segment(proj)}/_apis/wit/wiql",
        json={"query": wiql},
        tool="query_work_items",
    )
    ids = ids_from_wiql(refs)
    if not ids:
        return []
    return await get_work_items_by_ids(client, ids, proj)


async def list_work_item_query_results(
    client: AzureDevOpsClient, project: str, query_id: str
) -> List[Dict[str, Any]]:
    """Execute a saved query by id or path, then fetch the matching work items."""
    if not _GUID_RE.match(query_id):
        query = await client.get(
            f"/{segment(project)}/_apis/wit/queries/{quote(query_id.strip('/'))}",
            tool="list_work_item_query_results",
        )
        query_id = str(query.get("id") or query_id)
    refs = await client.get(
        f"/{segment(project)}/_apis/wit/wiql/{segment(query_id)}",
        tool="list_work_item_query_results",
    )
    ids = ids_from_wiql(refs)
    if not ids:
        return []
    return await get_work_items_by_ids(client, ids, project)


async def create_work_item(
    client: AzureDevOpsClient,
    work_item_type: str,
    title: str,
    description: Optional[str] = None,
    additional_fields: Optional[Dict[str, Any]] = None,
    project: Optional[str] = None,
) -> Dict[str, Any]:
    fields: Dict[str, Any] = {"System.Title": title}
    if description:
        fields["System.Description"] = description
    fields.update(additional_fields or {})
    return await client.post(
        _work_item_path(client, project, f"/${segment(work_item_type)}"),
        json=_patch_document(fields),
        content_type=JSON_PATCH,
        tool="create_work_item",
    )


async def update_work_item(
    client: AzureDevOpsClient,
    id: int,
    fields: Dict[str, Any],
    comment: Optional[str] = None,
    project: Optional[str] = None,
) -> Dict[str, Any]:
    return await client.patch(
        _work_item_path(client, project, f"/{id}"),
        json=_patch_document(fields, comment),
        content_type=JSON_PATCH,
        tool="update_work_item",
    )


async def assign_work_item(
    client: AzureDevOpsClient,
    id: int,
    assignee: str,
    comment: Optional[str] = None,
    project: Optional[str] = None,
) -> Dict[str, Any]:
    return await client.patch(
        _work_item_path(client, project, f"/{id}"),
        json=_patch_document({"System.AssignedTo": assignee}, comment),
        content_type=JSON_PATCH,
        tool="assign_work_item",
    )


async def get_work_item_revisions(
    client: AzureDevOpsClient, id: int, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    payload = await client.get(
        _work_item_path(client, project, f"/{id}/revisions"),
        tool="get_work_item_revisions",
    )
    return value_elements(payload)


async def list_work_item_updates(
    client: AzureDevOpsClient, id: int, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    payload = await client.get(
        _work_item_path(client, project, f"/{id}/updates"),
        tool="list_work_item_updates",
    )
    return value_elements(payload)


async def _relations(
    client: AzureDevOpsClient, id: int, project: Optional[str], tool: str
) -> List[Dict[str, Any]]:
    payload = await client.get(
        _work_item_path(client, project, f"/{id}"),
        params={"$expand": "relations"},
        tool=tool,
    )
    return value_elements(payload, "relations")


async def get_work_item_links(
    client: AzureDevOpsClient, id: int, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    return await _relations(client, id, project, "get_work_item_links")


async def list_work_item_relations(
    client: AzureDevOpsClient, id: int, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    return await _relations(client, id, project, "list_work_item_relations")


async def list_work_item_attachments(
    client: AzureDevOpsClient, id: int, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    """Attachments are the work item's AttachedFile relations."""
    relations = await _relations(client, id, project, "list_work_item_attachments")
    attachments: List[Dict[str, Any]] = []
    for rel in relations:
        if rel.get("rel") != "AttachedFile":
            continue
        url = rel.get("url") or ""
        attachments.append(
            {
                "id": dig(rel, "attributes", "id", default=None) or url.rsplit("/", 1)[-1],
                "name": dig(rel, "attributes", "name", default=None),
                "size": dig(rel, "attributes", "resourceSize", default=None),
                "createdDate": dig(rel, "attributes", "resourceCreatedDate", default=None),
                "comment": dig(rel, "attributes", "comment", default=None),
                "url": url,
            }
        )
    return attachments


async def list_work_item_comments(
    client: AzureDevOpsClient, id: int, project: Optional[str] = None
) -> List[Dict[str, Any]]:
    payload = await client.get(
        _work_item_path(client, project, f"/{id}/comments"),
        api_version=COMMENTS_API_VERSION,
        tool="list_work_item_comments",
    )
    return value_elements(payload, "comments")
