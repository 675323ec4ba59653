from __future__ import annotations

import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings
from starlette.middleware.cors import CORSMiddleware

from azdo_mcp.core.assistant import ChatAssistant
from azdo_mcp.core.config import create_client_from_env
from azdo_mcp.core.dispatcher import Dispatcher
from azdo_mcp.core.registry import register_catalog_tools
from azdo_mcp.transports.http.api import build_api_app, is_api_path
from azdo_mcp.transports.http.config import HttpConfig
from azdo_mcp.transports.http.request_id_middleware import (
    CORRELATION_ID_HEADER,
    REQUEST_ID_HEADER,
    RequestIdMiddleware,
)

log = logging.getLogger(__name__)

SERVER_NAME = "azure-devops-mcp"


def build_fastmcp(cfg: HttpConfig, dispatcher: Dispatcher) -> FastMCP:
    """Create and configure a FastMCP instance with the catalog tools registered."""
    allowed_hosts = [cfg.host, f"{cfg.host}:*", "testserver"]
    for origin in cfg.allowed_origins:
        host = origin.split("://", 1)[1]
        if host not in allowed_hosts:
            allowed_hosts.append(host)

    transport_security = TransportSecuritySettings(
        enable_dns_rebinding_protection=True,
        allowed_hosts=allowed_hosts,
        allowed_origins=list(cfg.allowed_origins),
    )

    fastmcp = FastMCP(
        SERVER_NAME,
        json_response=cfg.json_response,
        stateless_http=cfg.stateless_http,
        streamable_http_path=cfg.path,
        host=cfg.host,
        port=cfg.port,
        transport_security=transport_security,
    )

    register_catalog_tools(fastmcp, dispatcher)

    log.info(
        "Built FastMCP (json_response=%s, stateless_http=%s, path=%s, host=%s, port=%s)",
        cfg.json_response,
        cfg.stateless_http,
        cfg.path,
        cfg.host,
        cfg.port,
    )
    return fastmcp


class ApiDispatcher:
    """
    ASGI wrapper that routes /health and /api/* to the chat API and everything
    else (MCP endpoint, lifespan) to the FastMCP app.
    Exposes router/state so tests can drive the lifespan through the main app.
    """

    def __init__(self, api_app, main_app):
        self.api_app = api_app
        self.main_app = main_app
        self.router = main_app.router
        self.state = main_app.state
        # Propagate lifespan handler if present
        if hasattr(main_app, "lifespan"):
            self.lifespan = main_app.lifespan

    async def __call__(self, scope, receive, send):
        if scope.get("type") == "http" and is_api_path(scope.get("path", "")):
            await self.api_app(scope, receive, send)
            return
        await self.main_app(scope, receive, send)


def build_http_app(
    cfg: Optional[HttpConfig] = None,
    dispatcher: Optional[Dispatcher] = None,
    assistant: Optional[ChatAssistant] = None,
):
    """Return an ASGI app serving the chat API next to the streamable HTTP MCP endpoint."""
    cfg = cfg or HttpConfig.from_env()
    if dispatcher is None:
        dispatcher = Dispatcher(create_client_from_env(use_dotenv=False))
        assistant = assistant or ChatAssistant.from_env(dispatcher)

    fastmcp = build_fastmcp(cfg, dispatcher)
    main_app = fastmcp.streamable_http_app()
    main_app.add_middleware(RequestIdMiddleware)

    api_app = build_api_app(dispatcher, assistant, cfg)
    # Added innermost first: CORS wraps RequestId so preflights still get CORS headers
    api_app.add_middleware(RequestIdMiddleware)
    if cfg.allowed_origins:
        api_app.add_middleware(
            CORSMiddleware,
            allow_origins=list(cfg.allowed_origins),
            allow_methods=["GET", "POST"],
            allow_headers=["Content-Type", REQUEST_ID_HEADER, CORRELATION_ID_HEADER],
            expose_headers=[REQUEST_ID_HEADER],
        )

    if assistant is None:
        log.info("Chat assistant not configured; /api/chat answers 503")

    return ApiDispatcher(api_app, main_app)


__all__ = ["ApiDispatcher", "HttpConfig", "build_fastmcp", "build_http_app"]
