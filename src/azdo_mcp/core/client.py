import logging
import time
from typing import Any, Dict, Optional

import httpx

from .context import ConnectionContext, current_request_id
from .observability import OBSERVABILITY_LOGGER, log_event

DEFAULT_API_VERSION = "7.1"


class AzureDevOpsClientError(Exception):
    """Base error for client failures."""


class AzureDevOpsHTTPError(AzureDevOpsClientError):
    def __init__(
        self,
        *,
        status_code: int,
        method: str,
        url: str,
        message: str,
        response_json: Optional[Dict[str, Any]] = None,
        response_text: Optional[str] = None,
    ):
        super().__init__(f"{status_code} {method} {url}: {message}")
        self.status_code = status_code
        self.method = method
        self.url = url
        self.message = message
        self.response_json = response_json
        self.response_text = response_text


class AzureDevOpsNotFoundError(AzureDevOpsHTTPError):
    """The addressed resource does not exist (HTTP 404)."""


class AzureDevOpsTransportError(AzureDevOpsClientError):
    """Network failure or timeout before a response was received."""


class AzureDevOpsParseError(AzureDevOpsClientError):
    pass


class AzureDevOpsClient:
    """
    Shared HTTP client for the Azure DevOps REST API.
    - Handles PAT auth, per-service hosts, api-version and timeouts
    - Returns parsed JSON payloads (or raw text for file content)
    - No business logic; backend operations own endpoint and shape decisions
    """

    def __init__(
        self,
        context: ConnectionContext,
        *,
        timeout_seconds: float = 30.0,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.AsyncClient] = None,
        request_id: Optional[str] = None,
    ):
        self.context = context
        self.timeout_seconds = timeout_seconds
        self.request_id = request_id
        self.log = logger or logging.getLogger(OBSERVABILITY_LOGGER)
        self._hosts = {
            "core": context.core_url,
            "search": context.search_url,
            "release": context.release_url,
            "identity": context.identity_url,
        }

        # Personal access tokens go in the password slot with an empty user
        auth = httpx.BasicAuth("", context.pat)

        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(
            auth=auth,
            headers={"Accept": "application/json"},
            timeout=timeout_seconds,
        )

    @property
    def default_project(self) -> str:
        return self.context.project

    def project_or_default(self, project: Optional[str] = None) -> str:
        resolved = project or self.context.project
        if not resolved:
            raise AzureDevOpsClientError(
                "No project given and AZURE_DEVOPS_PROJECT is not configured."
            )
        return resolved

    def url_for(self, path: str, host: str = "core") -> str:
        try:
            base = self._hosts[host]
        except KeyError:
            raise ValueError(f"Unknown Azure DevOps host: {host}") from None
        if not path.startswith("/"):
            path = "/" + path
        return base + path

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "AzureDevOpsClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        host: str = "core",
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        content_type: Optional[str] = None,
        api_version: Optional[str] = DEFAULT_API_VERSION,
        tool: Optional[str] = None,
        expect_json: bool = True,
        accept: Optional[str] = None,
    ) -> Any:
        """
        Core request method.
        - Adds api-version unless the caller passes api_version=None
        - Raises AzureDevOpsNotFoundError on 404, AzureDevOpsHTTPError on other non-2xx
        - Raises AzureDevOpsTransportError on network/timeout errors
        - Raises AzureDevOpsParseError if the response isn't valid JSON
        """
        method = method.upper()
        url = self.url_for(path, host)
        query: Dict[str, Any] = {
            k: v for k, v in (params or {}).items() if v is not None
        }
        if api_version:
            query.setdefault("api-version", api_version)
        headers: Dict[str, str] = {}
        if content_type:
            headers["Content-Type"] = content_type
        if accept:
            headers["Accept"] = accept

        start = time.perf_counter()
        status: Any = "exception"
        error_type: Optional[str] = None
        try:
            resp = await self.http.request(
                method, url, params=query, json=json, headers=headers or None
            )
            status = resp.status_code
            if resp.status_code < 200 or resp.status_code >= 300:
                err = self._to_http_error(resp, method=method)
                error_type = type(err).__name__
                raise err
            if not expect_json:
                return resp.text
            return self._safe_json(resp)
        except httpx.HTTPError as exc:
            error_type = type(exc).__name__
            raise AzureDevOpsTransportError(
                f"Network/timeout error calling {method} {url}: {exc}"
            ) from exc
        finally:
            duration_ms = int((time.perf_counter() - start) * 1000)
            # structured log without secrets
            log_event(
                "op_call",
                self.log,
                request_id=self.request_id or current_request_id(),
                tool=tool,
                method=method,
                endpoint=path,
                status=status,
                duration_ms=duration_ms,
                error_type=error_type,
            )

    def _safe_json(self, resp: httpx.Response) -> Dict[str, Any]:
        # Handle empty responses (204 No Content, etc.)
        if not resp.content:
            return {}

        try:
            data = resp.json()
        except ValueError as exc:
            snippet = (resp.text or "")[:500]
            raise AzureDevOpsParseError(
                f"Expected JSON from {resp.request.method} "
                f"{resp.request.url}, got non-JSON body snippet: "
                f"{snippet!r}"
            ) from exc

        if not isinstance(data, dict):
            raise AzureDevOpsParseError(
                f"Expected top-level JSON object from "
                f"{resp.request.method} {resp.request.url}, "
                f"got {type(data).__name__}"
            )
        return data

    def _to_http_error(
        self, resp: httpx.Response, *, method: str
    ) -> AzureDevOpsHTTPError:
        url = str(resp.request.url)
        response_json: Optional[Dict[str, Any]] = None
        response_text: Optional[str] = None
        message = resp.reason_phrase or "request failed"

        try:
            parsed = resp.json()
            if isinstance(parsed, dict):
                response_json = parsed
                message = parsed.get("message") or parsed.get("error") or message
        except ValueError:
            response_text = (resp.text or "")[:500]
            if response_text.strip():
                message = " ".join(response_text.split())[:200]

        error_cls = (
            AzureDevOpsNotFoundError if resp.status_code == 404 else AzureDevOpsHTTPError
        )
        return error_cls(
            status_code=resp.status_code,
            method=method,
            url=url,
            message=message,
            response_json=response_json,
            response_text=response_text,
        )

    async def get(
        self,
        path: str,
        *,
        host: str = "core",
        params: Optional[Dict[str, Any]] = None,
        api_version: Optional[str] = DEFAULT_API_VERSION,
        tool: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self.request(
            "GET", path, host=host, params=params, api_version=api_version, tool=tool
        )

    async def get_text(
        self,
        path: str,
        *,
        host: str = "core",
        params: Optional[Dict[str, Any]] = None,
        tool: Optional[str] = None,
    ) -> str:
        return await self.request(
            "GET",
            path,
            host=host,
            params=params,
            tool=tool,
            expect_json=False,
            accept="text/plain",
        )

    async def post(
        self,
        path: str,
        *,
        json: Any,
        host: str = "core",
        params: Optional[Dict[str, Any]] = None,
        content_type: Optional[str] = None,
        api_version: Optional[str] = DEFAULT_API_VERSION,
        tool: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self.request(
            "POST",
            path,
            host=host,
            params=params,
            json=json,
            content_type=content_type,
            api_version=api_version,
            tool=tool,
        )

    async def patch(
        self,
        path: str,
        *,
        json: Any,
        params: Optional[Dict[str, Any]] = None,
        content_type: Optional[str] = None,
        tool: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self.request(
            "PATCH",
            path,
            params=params,
            json=json,
            content_type=content_type,
            tool=tool,
        )
