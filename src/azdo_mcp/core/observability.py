from __future__ import annotations

import logging
from typing import Any, Dict, Tuple

OBSERVABILITY_LOGGER = "azdo_mcp.observability"

# Fields each structured event carries, in output order
EVENT_FIELDS: Dict[str, Tuple[str, ...]] = {
    "op_call": (
        "request_id",
        "tool",
        "method",
        "endpoint",
        "status",
        "duration_ms",
        "error_type",
    ),
    "tool_call": ("request_id", "tool", "status", "error_kind", "duration_ms"),
    "http_request": ("request_id", "method", "path", "status", "duration_ms"),
    "chat_turn": ("request_id", "tool_used", "status"),
}

LOG_EXTRA_FIELDS: Tuple[str, ...] = tuple(
    dict.fromkeys(f for fields in EVENT_FIELDS.values() for f in fields)
)


def event_fields(event: str | None) -> Tuple[str, ...]:
    return EVENT_FIELDS.get(event or "", LOG_EXTRA_FIELDS)


def log_event(event: str, logger: logging.Logger | None = None, **fields: Any) -> None:
    """
    Emit one structured event at INFO.
    Only the fields declared for the event are attached to the record.
    """
    log = logger or logging.getLogger(OBSERVABILITY_LOGGER)
    allowed = event_fields(event)
    extra = {k: v for k, v in fields.items() if k in allowed}
    extra["event"] = event
    log.info(event, extra=extra)


__all__ = [
    "EVENT_FIELDS",
    "LOG_EXTRA_FIELDS",
    "OBSERVABILITY_LOGGER",
    "event_fields",
    "log_event",
]
