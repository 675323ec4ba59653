from __future__ import annotations

from typing import Any, Dict, List

from azdo_mcp.core.client import AzureDevOpsClient, AzureDevOpsNotFoundError
from azdo_mcp.core.tools._collections import optional_list, segment, value_elements


def _team_path(project: str, team: str) -> str:
    return f"/{segment(project)}/{segment(team)}/_apis/work"


async def list_team_iterations(
    client: AzureDevOpsClient, project: str, team: str
) -> List[Dict[str, Any]]:
    return await optional_list(
        client.get(
            _team_path(project, team) + "/teamsettings/iterations",
            tool="list_team_iterations",
        )
    )


async def list_iteration_capacities(
    client: AzureDevOpsClient, project: str, team: str, iteration_id: str
) -> List[Dict[str, Any]]:
    """Per-member capacity; newer API versions nest members under teamMembers."""
    try:
        payload = await client.get(
            _team_path(project, team)
            + f"/teamsettings/iterations/{segment(iteration_id)}/capacities",
            tool="list_iteration_capacities",
        )
    except AzureDevOpsNotFoundError:
        return []
    return value_elements(payload, "teamMembers") or value_elements(payload)


async def list_team_members(
    client: AzureDevOpsClient, project: str, team: str
) -> List[Dict[str, Any]]:
    return await optional_list(
        client.get(
            f"/_apis/projects/{segment(project)}/teams/{segment(team)}/members",
            tool="list_team_members",
        )
    )


async def list_boards(
    client: AzureDevOpsClient, project: str, team: str
) -> List[Dict[str, Any]]:
    return await optional_list(
        client.get(_team_path(project, team) + "/boards", tool="list_boards")
    )


async def list_board_columns(
    client: AzureDevOpsClient, project: str, team: str, board: str
) -> List[Dict[str, Any]]:
    return await optional_list(
        client.get(
            _team_path(project, team) + f"/boards/{segment(board)}/columns",
            tool="list_board_columns",
        )
    )


async def list_board_rows(
    client: AzureDevOpsClient, project: str, team: str, board: str
) -> List[Dict[str, Any]]:
    return await optional_list(
        client.get(
            _team_path(project, team) + f"/boards/{segment(board)}/rows",
            tool="list_board_rows",
        )
    )
