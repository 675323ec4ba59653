"""Error taxonomy shared by the dispatcher, the assistant and the transports."""

from __future__ import annotations

from typing import Optional

from .client import (
    AzureDevOpsClientError,
    AzureDevOpsHTTPError,
    AzureDevOpsNotFoundError,
    AzureDevOpsParseError,
    AzureDevOpsTransportError,
)
from .context import ConfigurationError


class ToolError(Exception):
    """A tool invocation failed; `kind` is a stable machine-readable tag."""

    kind = "error"

    def __init__(self, message: str, *, tool: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.tool = tool


class UnknownToolError(ToolError):
    kind = "unknown_tool"

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}", tool=name)


class MissingArgumentError(ToolError):
    kind = "missing_argument"

    def __init__(self, tool: str, parameter: str):
        super().__init__(
            f"Missing required parameter '{parameter}' for tool {tool}", tool=tool
        )
        self.parameter = parameter


class InvalidArgumentError(ToolError):
    kind = "invalid_argument"

    def __init__(self, tool: str, parameter: str, expected: str, value: object):
        super().__init__(
            f"Invalid value for parameter '{parameter}' of tool {tool}: "
            f"expected {expected}, got {type(value).__name__}",
            tool=tool,
        )
        self.parameter = parameter
        self.expected = expected


class ToolExecutionError(ToolError):
    """The backend call behind a tool failed."""

    def __init__(self, message: str, *, kind: str = "error", tool: Optional[str] = None):
        super().__init__(message, tool=tool)
        self.kind = kind


class RegistryMismatchError(RuntimeError):
    """Tool descriptors and backend operations do not correspond one to one."""


class AssistantError(Exception):
    """The language model round trip failed."""


__all__ = [
    "AssistantError",
    "AzureDevOpsClientError",
    "AzureDevOpsHTTPError",
    "AzureDevOpsNotFoundError",
    "AzureDevOpsParseError",
    "AzureDevOpsTransportError",
    "ConfigurationError",
    "InvalidArgumentError",
    "MissingArgumentError",
    "RegistryMismatchError",
    "ToolError",
    "ToolExecutionError",
    "UnknownToolError",
]
