from __future__ import annotations

import asyncio

import uvicorn

from azdo_mcp.core.assistant import ChatAssistant
from azdo_mcp.core.config import create_client_from_env
from azdo_mcp.core.dispatcher import Dispatcher
from azdo_mcp.core.logging import setup_logging

from .app import build_http_app
from .config import HttpConfig


async def main() -> None:
    cfg = HttpConfig.from_env()
    setup_logging(cfg.log_level)
    client = create_client_from_env(use_dotenv=False)
    try:
        dispatcher = Dispatcher(client)
        app = build_http_app(
            cfg, dispatcher=dispatcher, assistant=ChatAssistant.from_env(dispatcher)
        )
        server = uvicorn.Server(
            uvicorn.Config(
                app,
                host=cfg.host,
                port=cfg.port,
                log_level=cfg.log_level.lower(),
            )
        )
        await server.serve()
    finally:
        await client.aclose()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
