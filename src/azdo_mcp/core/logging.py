import logging
from typing import Any, List

from .observability import event_fields


class LogfmtFormatter(logging.Formatter):
    """logfmt lines: level, logger, event, then the event's declared fields."""

    def format(self, record: logging.LogRecord) -> str:
        event = getattr(record, "event", None) or record.getMessage()
        parts: List[str] = [
            f"level={record.levelname.lower()}",
            f"logger={record.name}",
        ]
        if event:
            parts.append(f"event={self._quote(event)}")

        parts.extend(
            f"{key}={self._quote(getattr(record, key))}"
            for key in event_fields(event)
            if getattr(record, key, None) is not None
        )

        if record.exc_info and record.exc_info[0] is not None:
            parts.append(f"exc_type={record.exc_info[0].__name__}")
        return " ".join(parts)

    @staticmethod
    def _quote(value: Any) -> str:
        if isinstance(value, (int, float, bool)):
            return str(value)
        text = str(value)
        if any(ch in text for ch in ' ="'):
            text = '"' + text.replace('"', '\\"') + '"'
        return text


def setup_logging(level: str = "INFO") -> None:
    """Send logfmt to stderr; stdout stays free for the stdio transport."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(LogfmtFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    # op_call already covers every backend request
    logging.getLogger("httpx").setLevel(logging.WARNING)


__all__ = ["LogfmtFormatter", "setup_logging"]
