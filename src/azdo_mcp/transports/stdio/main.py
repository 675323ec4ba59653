from __future__ import annotations

import asyncio
import os

from mcp.server.fastmcp import FastMCP

from azdo_mcp.core.config import create_client_from_env
from azdo_mcp.core.dispatcher import Dispatcher
from azdo_mcp.core.logging import setup_logging
from azdo_mcp.core.registry import register_catalog_tools


async def main() -> None:
    # .env is read here; the HTTP transport only uses the process environment
    client = create_client_from_env(use_dotenv=True)
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))

    app = FastMCP("azure-devops-mcp")
    register_catalog_tools(app, Dispatcher(client))

    try:
        await app.run_stdio_async()
    finally:
        await client.aclose()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
