from __future__ import annotations

import os
from typing import Tuple

from dotenv import load_dotenv

from .client import AzureDevOpsClient
from .context import ConfigurationError, ConnectionContext


def load_env_config(*, use_dotenv: bool = True) -> Tuple[str, str, str]:
    """Load organization URL, PAT and default project from environment (optional .env)."""
    if use_dotenv:
        load_dotenv()
    org_url = os.getenv("AZURE_DEVOPS_ORG_URL", "").strip()
    pat = os.getenv("AZURE_DEVOPS_PAT", "").strip()
    project = os.getenv("AZURE_DEVOPS_PROJECT", "").strip()
    return org_url, pat, project


def load_connection_context(*, use_dotenv: bool = True) -> ConnectionContext:
    """Resolve the connection context once; malformed or missing settings are fatal."""
    org_url, pat, project = load_env_config(use_dotenv=use_dotenv)
    context = ConnectionContext.from_org_url(org_url, pat=pat, project=project)
    if not context.pat:
        raise ConfigurationError("AZURE_DEVOPS_PAT not set")
    return context


def create_client_from_env(*, use_dotenv: bool = True, **kwargs) -> AzureDevOpsClient:
    """Create an AzureDevOpsClient from environment variables."""
    return AzureDevOpsClient(load_connection_context(use_dotenv=use_dotenv), **kwargs)


__all__ = ["load_env_config", "load_connection_context", "create_client_from_env"]
