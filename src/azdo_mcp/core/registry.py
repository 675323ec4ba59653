from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from types import ModuleType
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Optional,
)

from .models import ParameterSpec, ToolDescriptor

if TYPE_CHECKING:
    from .dispatcher import Dispatcher

log = logging.getLogger("azdo_mcp.core.registry")

TOOLS_PACKAGE = "azdo_mcp.core.tools"

_ANNOTATIONS: Dict[str, Any] = {
    "string": str,
    "integer": int,
    "number": float,
    "boolean": bool,
    "object": Dict[str, Any],
}


# --- Discovery helpers ----------------------------------------------------- #


def discover_tool_modules(package_name: str = TOOLS_PACKAGE) -> List[ModuleType]:
    """Import all modules under the given tools package."""
    modules: List[ModuleType] = []
    base_pkg = importlib.import_module(package_name)

    for finder in pkgutil.iter_modules(base_pkg.__path__, base_pkg.__name__ + "."):
        if finder.name.rsplit(".", 1)[-1].startswith("_"):
            continue
        modules.append(importlib.import_module(finder.name))

    return modules


def iter_tool_functions(module: ModuleType) -> Iterable[Callable]:
    """Yield backend operations: public coroutines defined here taking `client` first."""
    for _, func in inspect.getmembers(module, inspect.iscoroutinefunction):
        if func.__name__.startswith("_"):
            continue
        if func.__module__ != module.__name__:
            # Skip imported functions
            continue

        params = list(inspect.signature(func).parameters.values())
        if not params or params[0].name != "client":
            log.debug(
                "Skipping %s.%s: first parameter must be 'client'",
                module.__name__,
                func.__name__,
            )
            continue

        yield func


def discover_operations(
    modules: Optional[List[ModuleType]] = None,
) -> Dict[str, Callable]:
    """Map operation name -> coroutine across all tool modules."""
    operations: Dict[str, Callable] = {}
    for module in modules or discover_tool_modules():
        for func in iter_tool_functions(module):
            name = func.__name__
            if name in operations:
                raise ValueError(f"Duplicate tool name detected: {name}")
            operations[name] = func
    return operations


# --- Wrapping / registration ---------------------------------------------- #


def _annotation(spec: ParameterSpec) -> Any:
    if spec.type == "array":
        inner = _ANNOTATIONS.get(spec.items or "string", Any)
        ann: Any = List[inner]  # type: ignore[valid-type]
    else:
        ann = _ANNOTATIONS[spec.type]
    return ann if spec.required else Optional[ann]


def _signature(descriptor: ToolDescriptor) -> inspect.Signature:
    params = []
    for spec in descriptor.parameters:
        default = inspect.Parameter.empty if spec.required else spec.default
        params.append(
            inspect.Parameter(
                spec.name,
                inspect.Parameter.KEYWORD_ONLY,
                default=default,
                annotation=_annotation(spec),
            )
        )
    return inspect.Signature(parameters=params, return_annotation=str)


def _wrap_tool(descriptor: ToolDescriptor, dispatcher: "Dispatcher") -> Callable:
    """
    Return a coroutine FastMCP can introspect.
    Failures come back as `Error: ...` text, the same as every other call site.
    """
    name = descriptor.name

    async def wrapped(**kwargs):
        arguments = {k: v for k, v in kwargs.items() if v is not None}
        outcome = await dispatcher.run(name, arguments)
        return outcome.text

    wrapped.__name__ = name
    wrapped.__doc__ = descriptor.description
    wrapped.__signature__ = _signature(descriptor)  # type: ignore[attr-defined]
    return wrapped


def register_catalog_tools(app, dispatcher: "Dispatcher") -> None:
    """Register every catalog tool on an app that exposes a .tool decorator."""
    if not hasattr(app, "tool"):
        raise TypeError("app must expose a 'tool' decorator")

    for descriptor in dispatcher.descriptors():
        wrapped = _wrap_tool(descriptor, dispatcher)
        app.tool(name=descriptor.name, description=descriptor.description)(wrapped)
        log.info("Registered tool: %s", descriptor.name)
