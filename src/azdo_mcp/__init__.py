"""azdo_mcp package exports."""

from .core import (
    AzureDevOpsClient,
    ChatAssistant,
    Dispatcher,
    create_client_from_env,
    format_result,
    register_catalog_tools,
)

__all__ = [
    "AzureDevOpsClient",
    "ChatAssistant",
    "Dispatcher",
    "create_client_from_env",
    "format_result",
    "register_catalog_tools",
]
