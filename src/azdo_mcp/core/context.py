"""Connection context and per-request correlation ids using ContextVars."""

from __future__ import annotations

import re
import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import Optional

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

REQUEST_ID_HEADER = "x-request-id"

# Trailing segments (a project or team page URL) are ignored
ORG_URL_RE = re.compile(r"^https?://dev\.azure\.com/([^/?#]+)(?:[/?#].*)?$", re.IGNORECASE)


class ConfigurationError(ValueError):
    """Raised at startup when connection settings are missing or malformed."""


@dataclass(frozen=True)
class ConnectionContext:
    """Organization, default project and credential, resolved once at startup."""

    org_url: str
    organization: str
    project: str = ""
    pat: str = field(default="", repr=False)

    @classmethod
    def from_org_url(
        cls, org_url: str, *, pat: str = "", project: str = ""
    ) -> "ConnectionContext":
        org_url = (org_url or "").strip().rstrip("/")
        if not org_url:
            raise ConfigurationError("AZURE_DEVOPS_ORG_URL not set")
        match = ORG_URL_RE.match(org_url)
        if not match:
            raise ConfigurationError(
                f"Invalid organization URL {org_url!r}; "
                "expected https://dev.azure.com/<organization>"
            )
        organization = match.group(1)
        return cls(
            org_url=f"https://dev.azure.com/{organization}",
            organization=organization,
            project=(project or "").strip(),
            pat=(pat or "").strip(),
        )

    @property
    def core_url(self) -> str:
        return f"https://dev.azure.com/{self.organization}"

    @property
    def search_url(self) -> str:
        return f"https://almsearch.dev.azure.com/{self.organization}"

    @property
    def release_url(self) -> str:
        return f"https://vsrm.dev.azure.com/{self.organization}"

    @property
    def identity_url(self) -> str:
        return f"https://vssps.dev.azure.com/{self.organization}"


def ensure_request_id(candidate: Optional[str] = None) -> str:
    return candidate or uuid.uuid4().hex


def apply_request_id(request_id: Optional[str] = None) -> Token:
    """Bind a request id for the current task; returns a token for reset."""
    return _request_id_var.set(ensure_request_id(request_id))


def reset_request_id(token: Token) -> None:
    _request_id_var.reset(token)


def current_request_id() -> Optional[str]:
    return _request_id_var.get()


__all__ = [
    "ConfigurationError",
    "ConnectionContext",
    "ORG_URL_RE",
    "REQUEST_ID_HEADER",
    "apply_request_id",
    "current_request_id",
    "ensure_request_id",
    "reset_request_id",
]
