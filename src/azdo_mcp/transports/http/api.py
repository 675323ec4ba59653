"""
JSON API for the chat front end.

    GET  /health              liveness
    GET  /api/tools           tool catalog
    POST /api/tools/{name}    direct invocation, body = arguments object
    POST /api/chat            natural-language turn, body = {"message": ...}
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import anyio
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse

from azdo_mcp.core.assistant import ChatAssistant
from azdo_mcp.core.dispatcher import Dispatcher
from azdo_mcp.core.errors import AssistantError
from azdo_mcp.core.models import ChatRequest, InvocationRequest

from .config import ERROR_BAD_REQUEST, ERROR_TIMEOUT, ERROR_UNAVAILABLE, HttpConfig

log = logging.getLogger(__name__)

API_PATH_PREFIX = "/api/"
HEALTH_PATH = "/health"

_STATUS_BY_KIND = {
    "unknown_tool": 404,
    "missing_argument": 400,
    "invalid_argument": 400,
}


def is_api_path(path: Optional[str]) -> bool:
    return bool(path) and (path == HEALTH_PATH or path.startswith(API_PATH_PREFIX))


def _error(request: Request, status_code: int, kind: str, message: str) -> JSONResponse:
    return JSONResponse(
        {
            "error": message,
            "kind": kind,
            "request_id": getattr(request.state, "request_id", ""),
        },
        status_code=status_code,
    )


def _timeout(request: Request) -> JSONResponse:
    return _error(request, 504, ERROR_TIMEOUT, "Request timed out")


async def _json_body(request: Request) -> Any:
    raw = await request.body()
    if not raw.strip():
        return {}
    return json.loads(raw)


def build_api_app(
    dispatcher: Dispatcher,
    assistant: Optional[ChatAssistant] = None,
    cfg: Optional[HttpConfig] = None,
) -> Starlette:
    cfg = cfg or HttpConfig()

    async def health(_request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"}, headers={"Cache-Control": "no-store"})

    async def list_tools(_request: Request) -> JSONResponse:
        return JSONResponse(
            {"tools": [d.to_catalog_entry() for d in dispatcher.descriptors()]}
        )

    async def call_tool(request: Request) -> JSONResponse:
        try:
            arguments = await _json_body(request)
        except ValueError:
            return _error(request, 400, ERROR_BAD_REQUEST, "Request body must be JSON")
        try:
            invocation = InvocationRequest(
                tool=request.path_params["name"], arguments=arguments
            )
        except ValidationError:
            return _error(
                request, 400, ERROR_BAD_REQUEST, "Request body must be a JSON object"
            )

        try:
            with anyio.fail_after(cfg.request_timeout_s):
                outcome = await dispatcher.run(invocation.tool, invocation.arguments)
        except TimeoutError:
            return _timeout(request)

        if outcome.is_error:
            kind = outcome.error_kind or "error"
            message = outcome.text
            if message.startswith("Error: "):
                message = message[len("Error: "):]
            return _error(request, _STATUS_BY_KIND.get(kind, 502), kind, message)
        return JSONResponse({"result": outcome.text, "raw": outcome.raw})

    async def chat(request: Request) -> JSONResponse:
        if assistant is None:
            return _error(
                request, 503, ERROR_UNAVAILABLE, "Chat assistant is not configured"
            )
        try:
            body = ChatRequest.model_validate(await _json_body(request))
        except (ValueError, ValidationError):
            return _error(request, 400, ERROR_BAD_REQUEST, "Message is required")
        if not body.message.strip():
            return _error(request, 400, ERROR_BAD_REQUEST, "Message is required")

        try:
            with anyio.fail_after(cfg.request_timeout_s):
                reply = await assistant.respond(body.message)
        except TimeoutError:
            return _timeout(request)
        except AssistantError as exc:
            log.warning("Chat turn failed: %s", exc)
            return _error(request, 502, "assistant_error", str(exc))

        payload: Dict[str, Any] = reply.model_dump()
        return JSONResponse(payload)

    app = Starlette()
    app.add_route(HEALTH_PATH, health, methods=["GET"])
    app.add_route("/api/tools", list_tools, methods=["GET"])
    app.add_route("/api/tools/{name}", call_tool, methods=["POST"])
    app.add_route("/api/chat", chat, methods=["POST"])
    return app


__all__ = ["build_api_app", "is_api_path"]
