"""Core domain surface for azure-devops-mcp (transport-agnostic)."""

from .assistant import SYSTEM_PROMPT, ChatAssistant
from .catalog import TOOLS, get_tool, tool_names
from .client import (
    AzureDevOpsClient,
    AzureDevOpsClientError,
    AzureDevOpsHTTPError,
    AzureDevOpsNotFoundError,
    AzureDevOpsParseError,
    AzureDevOpsTransportError,
)
from .config import create_client_from_env, load_connection_context, load_env_config
from .context import (
    ConfigurationError,
    ConnectionContext,
    apply_request_id,
    current_request_id,
    ensure_request_id,
    reset_request_id,
)
from .dispatcher import Dispatcher, ToolOutcome
from .errors import (
    AssistantError,
    InvalidArgumentError,
    MissingArgumentError,
    RegistryMismatchError,
    ToolError,
    ToolExecutionError,
    UnknownToolError,
)
from .formatters import format_result
from .models import (
    ChatReply,
    ChatRequest,
    InvocationRequest,
    ParameterSpec,
    ToolDescriptor,
)
from .registry import (
    discover_operations,
    discover_tool_modules,
    iter_tool_functions,
    register_catalog_tools,
)

__all__ = [
    # Client
    "AzureDevOpsClient",
    # Exceptions
    "AzureDevOpsClientError",
    "AzureDevOpsHTTPError",
    "AzureDevOpsNotFoundError",
    "AzureDevOpsParseError",
    "AzureDevOpsTransportError",
    "AssistantError",
    "ConfigurationError",
    "InvalidArgumentError",
    "MissingArgumentError",
    "RegistryMismatchError",
    "ToolError",
    "ToolExecutionError",
    "UnknownToolError",
    # Catalog and models
    "TOOLS",
    "get_tool",
    "tool_names",
    "ChatReply",
    "ChatRequest",
    "InvocationRequest",
    "ParameterSpec",
    "ToolDescriptor",
    # Dispatch and rendering
    "Dispatcher",
    "ToolOutcome",
    "format_result",
    "ChatAssistant",
    "SYSTEM_PROMPT",
    # Config helpers
    "create_client_from_env",
    "load_connection_context",
    "load_env_config",
    # Registry helpers
    "discover_operations",
    "discover_tool_modules",
    "iter_tool_functions",
    "register_catalog_tools",
    # Context
    "ConnectionContext",
    "apply_request_id",
    "current_request_id",
    "ensure_request_id",
    "reset_request_id",
]
