import json

import pytest
import respx
from httpx import Response
from azdo_mcp.core.client import AzureDevOpsClient, AzureDevOpsNotFoundError
from azdo_mcp.core.context import ConnectionContext
from azdo_mcp.core.tools.work_items import (
    MAX_BATCH_IDS,
    assign_work_item,
    create_work_item,
    get_work_items_by_ids,
    list_work_item_attachments,
    list_work_item_comments,
    list_work_item_query_results,
    query_work_items,
    update_work_item,
)

BASE = "https://dev.azure.com/contoso/Fabrikam/_apis/wit"


@pytest.fixture
def client():
    return AzureDevOpsClient(
        ConnectionContext.from_org_url(
            "https://dev.azure.com/contoso", pat="pat", project="Fabrikam"
        )
    )


def _work_item(id_, title):
    return {"id": id_, "fields": {"System.Title": title}}


@pytest.mark.asyncio
@respx.mock
async def test_query_with_zero_results_never_batch_fetches(client):
    wiql = respx.post(f"{BASE}/wiql").mock(
        return_value=Response(200, json={"queryType": "flat", "workItems": []})
    )
    batch = respx.get(f"{BASE}/workitems").mock(
        return_value=Response(200, json={"value": []})
    )

    result = await query_work_items(client, "SELECT [System.Id] FROM WorkItems")

    assert result == []
    assert wiql.call_count == 1
    assert batch.call_count == 0
    assert json.loads(wiql.calls[0].request.content) == {
        "query": "SELECT [System.Id] FROM WorkItems"
    }


@pytest.mark.asyncio
@respx.mock
async def test_query_batch_fetches_ids_in_result_order(client):
    respx.post(f"{BASE}/wiql").mock(
        return_value=Response(200, json={"workItems": [{"id": 7}, {"id": 9}]})
    )
    batch = respx.get(f"{BASE}/workitems").mock(
        return_value=Response(
            200, json={"count": 2, "value": [_work_item(7, "a"), _work_item(9, "b")]}
        )
    )

    result = await query_work_items(client, "SELECT [System.Id] FROM WorkItems")

    assert batch.call_count == 1
    assert batch.calls[0].request.url.params["ids"] == "7,9"
    assert [wi["id"] for wi in result] == [7, 9]


@pytest.mark.asyncio
@respx.mock
async def test_query_uses_explicit_project(client):
    route = respx.post(
        "https://dev.azure.com/contoso/Other%20Project/_apis/wit/wiql"
    ).mock(return_value=Response(200, json={"workItems": []}))

    await query_work_items(client, "SELECT [System.Id] FROM WorkItems", "Other Project")

    assert route.called


@pytest.mark.asyncio
@respx.mock
async def test_link_queries_collect_distinct_targets(client):
    respx.post(f"{BASE}/wiql").mock(
        return_value=Response(
            200,
            json={
                "workItemRelations": [
                    {"source": None, "target": {"id": 1}},
                    {"source": {"id": 1}, "target": {"id": 2}},
                    {"source": {"id": 3}, "target": {"id": 2}},
                ]
            },
        )
    )
    batch = respx.get(f"{BASE}/workitems").mock(
        return_value=Response(200, json={"value": []})
    )

    await query_work_items(client, "SELECT [System.Id] FROM WorkItemLinks")

    assert batch.calls[0].request.url.params["ids"] == "1,2"


@pytest.mark.asyncio
@respx.mock
async def test_batch_fetch_is_chunked(client):
    batch = respx.get(f"{BASE}/workitems").mock(
        return_value=Response(200, json={"value": [_work_item(1, "x")]})
    )

    ids = list(range(1, MAX_BATCH_IDS + 6))
    result = await get_work_items_by_ids(client, ids)

    assert batch.call_count == 2
    assert len(batch.calls[1].request.url.params["ids"].split(",")) == 5
    assert len(result) == 2


@pytest.mark.asyncio
async def test_batch_fetch_with_no_ids_makes_no_call(client):
    with respx.mock:
        assert await get_work_items_by_ids(client, []) == []


@pytest.mark.asyncio
@respx.mock
async def test_saved_query_by_path_is_resolved_to_id(client):
    guid = "0b5f1c2e-3d4a-4b6c-8d9e-0f1a2b3c4d5e"
    lookup = respx.get(f"{BASE}/queries/Shared%20Queries/Active%20Bugs").mock(
        return_value=Response(200, json={"id": guid, "name": "Active Bugs"})
    )
    run = respx.get(f"{BASE}/wiql/{guid}").mock(
        return_value=Response(200, json={"workItems": [{"id": 4}]})
    )
    respx.get(f"{BASE}/workitems").mock(
        return_value=Response(200, json={"value": [_work_item(4, "bug")]})
    )

    result = await list_work_item_query_results(
        client, "Fabrikam", "Shared Queries/Active Bugs"
    )

    assert lookup.called
    assert run.called
    assert result[0]["id"] == 4


@pytest.mark.asyncio
@respx.mock
async def test_create_sends_json_patch_document(client):
    route = respx.post(url__startswith=f"{BASE}/workitems/").mock(
        return_value=Response(200, json={"id": 42})
    )

    await create_work_item(
        client,
        "User Story",
        "Checkout",
        "As a buyer",
        {"Microsoft.VSTS.Common.Priority": 1},
    )

    request = route.calls[0].request
    assert request.url.path.endswith("/workitems/$User Story")
    assert request.headers["Content-Type"] == "application/json-patch+json"
    assert json.loads(request.content) == [
        {"op": "add", "path": "/fields/System.Title", "value": "Checkout"},
        {"op": "add", "path": "/fields/System.Description", "value": "As a buyer"},
        {"op": "add", "path": "/fields/Microsoft.VSTS.Common.Priority", "value": 1},
    ]


@pytest.mark.asyncio
@respx.mock
async def test_update_without_comment_has_no_history_entry(client):
    route = respx.patch(f"{BASE}/workitems/5").mock(
        return_value=Response(200, json={"id": 5})
    )

    await update_work_item(client, 5, {"System.Description": "new"})

    assert json.loads(route.calls[0].request.content) == [
        {"op": "add", "path": "/fields/System.Description", "value": "new"}
    ]


@pytest.mark.asyncio
@respx.mock
async def test_assign_with_comment_adds_history(client):
    route = respx.patch(f"{BASE}/workitems/5").mock(
        return_value=Response(200, json={"id": 5})
    )

    await assign_work_item(client, 5, "ada@contoso.com", "please take this")

    assert json.loads(route.calls[0].request.content) == [
        {"op": "add", "path": "/fields/System.AssignedTo", "value": "ada@contoso.com"},
        {"op": "add", "path": "/fields/System.History", "value": "please take this"},
    ]


@pytest.mark.asyncio
@respx.mock
async def test_attachments_are_attached_file_relations(client):
    route = respx.get(f"{BASE}/workitems/8").mock(
        return_value=Response(
            200,
            json={
                "id": 8,
                "relations": [
                    {
                        "rel": "AttachedFile",
                        "url": f"{BASE}/attachments/abc-123",
                        "attributes": {
                            "name": "log.txt",
                            "resourceSize": 120,
                            "resourceCreatedDate": "2024-01-01",
                        },
                    },
                    {"rel": "System.LinkTypes.Related", "url": f"{BASE}/workItems/9"},
                ],
            },
        )
    )

    attachments = await list_work_item_attachments(client, 8)

    assert route.calls[0].request.url.params["$expand"] == "relations"
    assert attachments == [
        {
            "id": "abc-123",
            "name": "log.txt",
            "size": 120,
            "createdDate": "2024-01-01",
            "comment": None,
            "url": f"{BASE}/attachments/abc-123",
        }
    ]


@pytest.mark.asyncio
@respx.mock
async def test_missing_work_item_raises_not_found(client):
    respx.get(f"{BASE}/workitems/999/comments").mock(
        return_value=Response(404, json={"message": "Work item 999 does not exist"})
    )

    with pytest.raises(AzureDevOpsNotFoundError):
        await list_work_item_comments(client, 999)


@pytest.mark.asyncio
@respx.mock
async def test_comments_use_preview_api(client):
    route = respx.get(f"{BASE}/workitems/3/comments").mock(
        return_value=Response(200, json={"totalCount": 1, "comments": [{"id": 1}]})
    )

    comments = await list_work_item_comments(client, 3)

    assert comments == [{"id": 1}]
    assert route.calls[0].request.url.params["api-version"] == "7.1-preview.4"
