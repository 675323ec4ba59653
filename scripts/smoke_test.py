from __future__ import annotations

import asyncio
import os
import sys

from azdo_mcp.core.client import AzureDevOpsClientError
from azdo_mcp.core.config import create_client_from_env
from azdo_mcp.core.context import ConfigurationError
from azdo_mcp.core.formatters import format_result
from azdo_mcp.core.tools.projects import list_projects
from azdo_mcp.core.tools.work_items import query_work_items


def _print_step(title: str) -> None:
    print(f"\n== {title}")


def _fail(msg: str) -> int:
    print(f"FAILED: {msg}")
    return 1


async def run_smoke_test() -> int:
    try:
        client = create_client_from_env(use_dotenv=True)
    except ConfigurationError as exc:
        return _fail(str(exc))

    top = int(os.getenv("SMOKE_TEST_TOP", "5") or 5)

    print("Config:")
    print(f"  organization: {client.context.organization}")
    print(f"  default project: {client.default_project or '(none)'}")

    async with client:
        _print_step("List projects")
        try:
            projects = await list_projects(client)
        except AzureDevOpsClientError as exc:
            return _fail(f"List projects failed: {exc}")
        print(format_result("list_projects", projects))
        if not projects:
            return _fail("No projects available.")

        project = client.default_project or projects[0].get("name")
        _print_step(f"WIQL query in {project}")
        wiql = (
            "SELECT [System.Id] FROM WorkItems "
            f"WHERE [System.TeamProject] = '{project}' "
            "ORDER BY [System.ChangedDate] DESC"
        )
        try:
            items = await query_work_items(client, wiql, project)
        except AzureDevOpsClientError as exc:
            return _fail(f"WIQL query failed: {exc}")
        print(format_result("query_work_items", items[:top]))

    print("\nPASSED smoke test.")
    return 0


def main() -> None:
    sys.exit(asyncio.run(run_smoke_test()))


if __name__ == "__main__":
    main()
