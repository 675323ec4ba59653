"""
Single invocation boundary between callers (MCP, HTTP API, chat assistant) and
the backend operations.

`Dispatcher.invoke` validates arguments against the tool's descriptor and calls
exactly one backend operation; `Dispatcher.run` adds formatting and turns every
failure into `Error: <message>` text.
"""

from __future__ import annotations

import inspect
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from .catalog import TOOLS
from .client import (
    AzureDevOpsClient,
    AzureDevOpsClientError,
    AzureDevOpsHTTPError,
    AzureDevOpsNotFoundError,
    AzureDevOpsParseError,
    AzureDevOpsTransportError,
)
from .context import current_request_id
from .errors import (
    InvalidArgumentError,
    MissingArgumentError,
    RegistryMismatchError,
    ToolError,
    ToolExecutionError,
    UnknownToolError,
)
from .formatters import format_result
from .models import ParameterSpec, ToolDescriptor
from .observability import OBSERVABILITY_LOGGER, log_event
from .registry import discover_operations

ClientProvider = Callable[[], AzureDevOpsClient]


@dataclass(frozen=True)
class Route:
    descriptor: ToolDescriptor
    operation: Callable


@dataclass(frozen=True)
class ToolOutcome:
    tool: str
    text: str
    raw: Any = None
    is_error: bool = False
    error_kind: Optional[str] = None


# --- argument coercion ----------------------------------------------------- #

_TRUE = {"true", "1", "yes"}
_FALSE = {"false", "0", "no"}


def _coerce_scalar(type_: str, value: Any) -> Any:
    """Return `value` as `type_` or raise ValueError."""
    if type_ == "string":
        if isinstance(value, str):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        raise ValueError
    if type_ == "integer":
        if isinstance(value, bool):
            raise ValueError
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            return int(value.strip())
        raise ValueError
    if type_ == "number":
        if isinstance(value, bool):
            raise ValueError
        if isinstance(value, (int, float)):
            return value
        if isinstance(value, str):
            return float(value.strip())
        raise ValueError
    if type_ == "boolean":
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in _TRUE | _FALSE:
            return value.strip().lower() in _TRUE
        raise ValueError
    if type_ == "object":
        if isinstance(value, dict):
            return value
        raise ValueError
    raise ValueError


def coerce_argument(tool: str, spec: ParameterSpec, value: Any) -> Any:
    try:
        if spec.type == "array":
            if not isinstance(value, (list, tuple)):
                raise ValueError
            return [_coerce_scalar(spec.items or "string", v) for v in value]
        return _coerce_scalar(spec.type, value)
    except ValueError:
        expected = f"array of {spec.items or 'string'}" if spec.type == "array" else spec.type
        raise InvalidArgumentError(tool, spec.name, expected, value) from None


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# --- dispatcher ------------------------------------------------------------ #


class Dispatcher:
    """
    Routes tool names to backend operations.
    - Routes are built once; descriptors and operations must match one to one
    - Arguments are bound positionally in descriptor order
    """

    def __init__(
        self,
        client: Union[AzureDevOpsClient, ClientProvider],
        *,
        registry: Sequence[ToolDescriptor] = TOOLS,
        operations: Optional[Mapping[str, Callable]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if callable(client) and not isinstance(client, AzureDevOpsClient):
            self._client_provider: ClientProvider = client
        else:
            self._client_provider = lambda: client  # type: ignore[assignment,return-value]
        self.log = logger or logging.getLogger(OBSERVABILITY_LOGGER)
        ops = dict(operations) if operations is not None else discover_operations()
        self._routes = self._build_routes(registry, ops)

    @staticmethod
    def _build_routes(
        registry: Sequence[ToolDescriptor], operations: Mapping[str, Callable]
    ) -> Dict[str, Route]:
        names = [d.name for d in registry]
        missing = [n for n in names if n not in operations]
        extra = sorted(set(operations) - set(names))
        if missing or extra:
            raise RegistryMismatchError(
                f"Tool registry and backend operations differ: "
                f"without operation={missing}, without descriptor={extra}"
            )

        routes: Dict[str, Route] = {}
        for descriptor in registry:
            operation = operations[descriptor.name]
            arity = len(inspect.signature(operation).parameters) - 1
            if arity != len(descriptor.parameters):
                raise RegistryMismatchError(
                    f"{descriptor.name}: descriptor has {len(descriptor.parameters)} "
                    f"parameters, operation takes {arity}"
                )
            routes[descriptor.name] = Route(descriptor, operation)
        return routes

    @property
    def tool_names(self) -> List[str]:
        return list(self._routes)

    def descriptors(self) -> List[ToolDescriptor]:
        return [route.descriptor for route in self._routes.values()]

    def route(self, name: str) -> Route:
        try:
            return self._routes[name]
        except KeyError:
            raise UnknownToolError(name) from None

    def validate(
        self, name: str, arguments: Optional[Mapping[str, Any]]
    ) -> Dict[str, Any]:
        """
        Coerce the supplied arguments, keyed by parameter name.
        Absent, None and blank values are dropped; a dropped required one raises.
        """
        descriptor = self.route(name).descriptor
        arguments = arguments or {}
        supplied: Dict[str, Any] = {}
        for spec in descriptor.parameters:
            value = arguments.get(spec.name)
            if _is_missing(value):
                if spec.required:
                    raise MissingArgumentError(name, spec.name)
                continue
            supplied[spec.name] = coerce_argument(name, spec, value)
        return supplied

    def bind(self, name: str, arguments: Optional[Mapping[str, Any]]) -> List[Any]:
        """Validate `arguments` and return the positional list for the operation."""
        return self._positional(name, self.validate(name, arguments))

    def _positional(self, name: str, supplied: Mapping[str, Any]) -> List[Any]:
        return [
            supplied.get(spec.name, spec.default)
            for spec in self.route(name).descriptor.parameters
        ]

    async def invoke(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> Any:
        """Run one backend operation and return its raw payload."""
        return await self._call(name, self.validate(name, arguments))

    async def _call(self, name: str, supplied: Mapping[str, Any]) -> Any:
        route = self.route(name)
        positional = self._positional(name, supplied)
        client = self._client_provider()
        try:
            return await route.operation(client, *positional)
        except AzureDevOpsNotFoundError as exc:
            raise ToolExecutionError(exc.message, kind="not_found", tool=name) from exc
        except AzureDevOpsHTTPError as exc:
            raise ToolExecutionError(
                f"{exc.status_code}: {exc.message}", kind="http_error", tool=name
            ) from exc
        except AzureDevOpsTransportError as exc:
            raise ToolExecutionError(str(exc), kind="transport_error", tool=name) from exc
        except AzureDevOpsParseError as exc:
            raise ToolExecutionError(str(exc), kind="parse_error", tool=name) from exc
        except (AzureDevOpsClientError, ValueError) as exc:
            raise ToolExecutionError(str(exc), kind="error", tool=name) from exc
        except Exception as exc:
            # Usually a backend reply in a shape the operation did not expect
            self.log.warning("Tool %s failed unexpectedly: %r", name, exc)
            raise ToolExecutionError(
                f"Unexpected {type(exc).__name__} from {name}: {exc}",
                kind="error",
                tool=name,
            ) from exc

    async def run(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> ToolOutcome:
        """Invoke and format; never raises for tool-level failures."""
        start = time.perf_counter()
        try:
            supplied = self.validate(name, arguments)
            raw = await self._call(name, supplied)
        except ToolError as exc:
            outcome = ToolOutcome(
                tool=name,
                text=f"Error: {' '.join(exc.message.split())}",
                is_error=True,
                error_kind=exc.kind,
            )
        else:
            outcome = ToolOutcome(
                tool=name, text=format_result(name, raw, supplied), raw=raw
            )
        log_event(
            "tool_call",
            self.log,
            request_id=current_request_id(),
            tool=name,
            status="error" if outcome.is_error else "ok",
            error_kind=outcome.error_kind,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        return outcome


__all__ = ["Dispatcher", "Route", "ToolOutcome", "coerce_argument"]
