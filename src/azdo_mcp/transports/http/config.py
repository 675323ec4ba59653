from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable, List, Tuple
from urllib.parse import urlsplit

# Error code strings used by the API and middlewares
ERROR_TIMEOUT = "timeout"
ERROR_BAD_REQUEST = "bad_request"
ERROR_UNAVAILABLE = "assistant_unavailable"


def _get_bool_env(name: str, default: bool) -> bool:
    """Parse a boolean environment variable with a safe default."""
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    if val in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if val in {"0", "false", "f", "no", "n", "off"}:
        return False
    return default


def _split_csv_env(name: str) -> List[str]:
    raw = os.getenv(name, "")
    return [part.strip() for part in raw.split(",") if part.strip()]


def _normalize_origin(origin: str) -> str:
    """Return `scheme://host[:port]`, dropping default ports; raise on anything else."""
    raw = (origin or "").strip()
    if not raw or raw.lower() == "null":
        raise ValueError("Null origin not allowed")

    parts = urlsplit(raw)
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"Invalid origin: {origin}")
    if parts.path not in {"", "/"} or parts.query or parts.fragment:
        raise ValueError("Origin must not include path, query, or fragment")

    scheme = parts.scheme.lower()
    if scheme not in {"http", "https"}:
        raise ValueError("Origin scheme must be http or https")
    if not parts.hostname:
        raise ValueError("Origin host missing")

    host = parts.hostname.strip().rstrip(".").encode("idna").decode("ascii").lower()
    default_port = 80 if scheme == "http" else 443
    if parts.port is None or parts.port == default_port:
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{parts.port}"


def _normalize_origin_list(origins: Iterable[str]) -> Tuple[str, ...]:
    return tuple(_normalize_origin(origin) for origin in origins)


@dataclass(frozen=True)
class HttpConfig:
    """Configuration for the HTTP transport (MCP endpoint plus chat API)."""

    host: str = "127.0.0.1"
    port: int = 8000
    path: str = "/mcp"
    json_response: bool = True
    stateless_http: bool = True
    allowed_origins: Tuple[str, ...] = ()
    request_timeout_s: float = 30.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "HttpConfig":
        request_timeout_s = float(os.getenv("MCP_REQUEST_TIMEOUT_S", "30") or 30)
        if request_timeout_s <= 0:
            raise ValueError("MCP_REQUEST_TIMEOUT_S must be greater than zero")

        return cls(
            host=os.getenv("FASTMCP_HOST", cls.host),
            port=int(os.getenv("FASTMCP_PORT", cls.port)),
            path=os.getenv("FASTMCP_STREAMABLE_HTTP_PATH", cls.path),
            json_response=_get_bool_env("FASTMCP_JSON_RESPONSE", cls.json_response),
            stateless_http=_get_bool_env("FASTMCP_STATELESS_HTTP", cls.stateless_http),
            allowed_origins=_normalize_origin_list(_split_csv_env("MCP_ALLOWED_ORIGINS")),
            request_timeout_s=request_timeout_s,
            log_level=os.getenv("LOG_LEVEL", cls.log_level) or cls.log_level,
        )


__all__ = [
    "ERROR_BAD_REQUEST",
    "ERROR_TIMEOUT",
    "ERROR_UNAVAILABLE",
    "HttpConfig",
    "_normalize_origin",
]
