import base64

import httpx
import pytest
import respx
from httpx import Response
from azdo_mcp.core.client import (
    AzureDevOpsClient,
    AzureDevOpsClientError,
    AzureDevOpsHTTPError,
    AzureDevOpsNotFoundError,
    AzureDevOpsParseError,
    AzureDevOpsTransportError,
)
from azdo_mcp.core.context import ConnectionContext

ORG = "https://dev.azure.com/contoso"


def _client(project: str = "Fabrikam") -> AzureDevOpsClient:
    context = ConnectionContext.from_org_url(ORG, pat="mock-pat", project=project)
    return AzureDevOpsClient(context)


@pytest.mark.asyncio
async def test_get_request_success_adds_api_version():
    async with respx.mock:
        route = respx.get(f"{ORG}/_apis/projects").mock(
            return_value=Response(200, json={"count": 1, "value": [{"id": "p1"}]})
        )

        async with _client() as client:
            data = await client.get("/_apis/projects")

        assert data["count"] == 1
        assert route.calls[0].request.url.params["api-version"] == "7.1"


@pytest.mark.asyncio
async def test_api_version_can_be_omitted_or_overridden():
    async with respx.mock:
        route = respx.get(f"{ORG}/_apis/connectionData").mock(
            return_value=Response(200, json={})
        )
        preview = respx.get(f"{ORG}/Fabrikam/_apis/dashboard/dashboards").mock(
            return_value=Response(200, json={"value": []})
        )

        async with _client() as client:
            await client.get("/_apis/connectionData", api_version=None)
            await client.get(
                "/Fabrikam/_apis/dashboard/dashboards", api_version="7.1-preview.3"
            )

        assert "api-version" not in route.calls[0].request.url.params
        assert preview.calls[0].request.url.params["api-version"] == "7.1-preview.3"


@pytest.mark.asyncio
async def test_auth_header_is_basic_with_empty_user():
    async with respx.mock:
        route = respx.get(f"{ORG}/_apis/projects").mock(
            return_value=Response(200, json={"value": []})
        )

        async with _client() as client:
            await client.get("/_apis/projects")

        # httpx.BasicAuth automatically encodes credentials
        sent = route.calls[0].request.headers
        expected = "Basic " + base64.b64encode(b":mock-pat").decode()

        assert sent.get("Authorization") == expected


@pytest.mark.asyncio
async def test_404_raises_not_found_error():
    async with respx.mock:
        respx.get(f"{ORG}/Fabrikam/_apis/wit/workitems/999").mock(
            return_value=Response(
                404, json={"message": "TF401232: Work item 999 does not exist"}
            )
        )

        async with _client() as client:
            with pytest.raises(AzureDevOpsNotFoundError) as exc:
                await client.get("/Fabrikam/_apis/wit/workitems/999")

        assert exc.value.status_code == 404
        assert "TF401232" in exc.value.message


@pytest.mark.asyncio
async def test_401_raises_http_error_not_not_found():
    async with respx.mock:
        respx.get(f"{ORG}/_apis/projects").mock(
            return_value=Response(401, text="Access Denied: bad token")
        )

        async with _client() as client:
            with pytest.raises(AzureDevOpsHTTPError) as exc:
                await client.get("/_apis/projects")

        assert not isinstance(exc.value, AzureDevOpsNotFoundError)
        assert exc.value.status_code == 401
        assert exc.value.message == "Access Denied: bad token"


@pytest.mark.asyncio
async def test_network_error_raises_transport_error():
    async with respx.mock:
        respx.get(f"{ORG}/_apis/projects").mock(
            side_effect=httpx.ConnectError("connection refused")
        )

        async with _client() as client:
            with pytest.raises(AzureDevOpsTransportError):
                await client.get("/_apis/projects")


@pytest.mark.asyncio
async def test_non_json_body_raises_parse_error():
    async with respx.mock:
        respx.get(f"{ORG}/_apis/projects").mock(
            return_value=Response(200, text="<html>sign in</html>")
        )
        respx.get(f"{ORG}/_apis/list").mock(return_value=Response(200, json=[1, 2]))

        async with _client() as client:
            with pytest.raises(AzureDevOpsParseError):
                await client.get("/_apis/projects")
            with pytest.raises(AzureDevOpsParseError):
                await client.get("/_apis/list")


@pytest.mark.asyncio
async def test_empty_body_returns_empty_dict():
    async with respx.mock:
        respx.patch(f"{ORG}/Fabrikam/_apis/wit/workitems/1").mock(
            return_value=Response(204)
        )

        async with _client() as client:
            data = await client.patch(
                "/Fabrikam/_apis/wit/workitems/1",
                json=[],
                content_type="application/json-patch+json",
            )

        assert data == {}


@pytest.mark.asyncio
async def test_content_type_and_host_routing():
    async with respx.mock:
        route = respx.post(
            "https://almsearch.dev.azure.com/contoso/_apis/search/codesearchresults"
        ).mock(return_value=Response(200, json={"count": 0, "results": []}))

        async with _client() as client:
            await client.post(
                "/_apis/search/codesearchresults",
                host="search",
                json={"searchText": "x"},
            )

        assert route.called
        assert route.calls[0].request.headers["Content-Type"] == "application/json"


@pytest.mark.asyncio
async def test_get_text_returns_raw_body():
    async with respx.mock:
        route = respx.get(f"{ORG}/Fabrikam/_apis/git/repositories/r/items").mock(
            return_value=Response(200, text="print('hi')\n")
        )

        async with _client() as client:
            text = await client.get_text("/Fabrikam/_apis/git/repositories/r/items")

        assert text == "print('hi')\n"
        assert route.calls[0].request.headers["Accept"] == "text/plain"


@pytest.mark.asyncio
async def test_unknown_host_raises_value_error():
    async with _client() as client:
        with pytest.raises(ValueError):
            client.url_for("/x", host="nowhere")


@pytest.mark.asyncio
async def test_project_or_default():
    async with _client(project="") as client:
        assert client.project_or_default("Explicit") == "Explicit"
        with pytest.raises(AzureDevOpsClientError):
            client.project_or_default(None)

    async with _client() as client:
        assert client.project_or_default(None) == "Fabrikam"
