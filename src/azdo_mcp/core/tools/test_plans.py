from __future__ import annotations

from typing import Any, Dict, List

from azdo_mcp.core.client import AzureDevOpsClient
from azdo_mcp.core.tools._collections import optional_list, segment


async def list_test_plans(client: AzureDevOpsClient, project: str) -> List[Dict[str, Any]]:
    return await optional_list(
        client.get(f"/{segment(project)}/_apis/testplan/plans", tool="list_test_plans")
    )


async def list_test_suites(
    client: AzureDevOpsClient, project: str, plan_id: int
) -> List[Dict[str, Any]]:
    return await optional_list(
        client.get(
            f"/{segment(project)}/_apis/testplan/Plans/{plan_id}/suites",
            tool="list_test_suites",
        )
    )
