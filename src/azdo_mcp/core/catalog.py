"""
Static tool catalog.

The order of `TOOLS` is the order clients see on discovery; the order of each
descriptor's parameters is the positional order of its backend operation.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from .models import ParameterSpec, ToolDescriptor

DEFAULT_PROJECT_HINT = (
    "Optional project name or ID. If not provided, uses the default project."
)


def _p(
    name: str,
    type_: str,
    description: str,
    *,
    required: bool = False,
    default=None,
    items=None,
) -> ParameterSpec:
    return ParameterSpec(
        name=name,
        type=type_,
        description=description,
        required=required,
        default=default,
        items=items,
    )


def _project(required: bool = False) -> ParameterSpec:
    if required:
        return _p("project", "string", "Project name or ID", required=True)
    return _p("project", "string", DEFAULT_PROJECT_HINT)


def _work_item_id(description: str = "Work item ID") -> ParameterSpec:
    return _p("id", "integer", description, required=True)


def _team() -> ParameterSpec:
    return _p("team", "string", "Team name or ID", required=True)


def _board() -> ParameterSpec:
    return _p("board", "string", "Board ID or name", required=True)


def _repository_id(required: bool = True) -> ParameterSpec:
    if required:
        return _p("repositoryId", "string", "Repository ID", required=True)
    return _p("repositoryId", "string", "Optional repository ID to filter")


def _tool(name: str, description: str, *parameters: ParameterSpec) -> ToolDescriptor:
    return ToolDescriptor(name=name, description=description, parameters=parameters)


TOOLS: Tuple[ToolDescriptor, ...] = (
    _tool("list_projects", "List all projects in the Azure DevOps organization"),
    _tool(
        "list_project_teams",
        "Retrieve a list of teams for the specified Azure DevOps project.",
        _p("project", "string", "The name or ID of the Azure DevOps project.", required=True),
        _p("mine", "boolean", "If true, only return teams that the authenticated user is a member of."),
        _p("top", "integer", "The maximum number of teams to return. Defaults to 100.", default=100),
        _p("skip", "integer", "The number of teams to skip for pagination. Defaults to 0.", default=0),
    ),
    _tool(
        "get_identity_ids",
        "Retrieve Azure DevOps identity IDs for a provided search filter.",
        _p(
            "searchFilter",
            "string",
            "Search filter (unique name, display name, email) to retrieve identity IDs for.",
            required=True,
        ),
    ),
    _tool(
        "query_work_items",
        "Query work items using WIQL (Azure DevOps Query Language)",
        _p(
            "wiql",
            "string",
            "WIQL query string, e.g., SELECT [System.Id] FROM WorkItems WHERE [System.State] = 'Active'",
            required=True,
        ),
        _project(),
    ),
    _tool(
        "get_work_items_by_ids",
        "Get work items by their IDs",
        _p("ids", "array", "Array of work item IDs", required=True, items="integer"),
        _project(),
    ),
    _tool(
        "get_builds",
        "Get recent builds for the project",
        _p("definitionId", "integer", "Optional build definition ID to filter"),
        _p("top", "integer", "Number of builds to retrieve (default 10)", default=10),
        _project(),
    ),
    _tool(
        "get_releases",
        "Get recent releases for the project",
        _p("top", "integer", "Number of releases to retrieve (default 10)", default=10),
        _project(),
    ),
    _tool(
        "create_work_item",
        "Create a new work item in Azure DevOps (uses the default project configured "
        "in the environment). Provide work item type and title. The project is already "
        "set, so you do not need to specify it.",
        _p(
            "workItemType",
            "string",
            'Type of work item (e.g., Issue, Task, Bug, User Story). If the user says "issue '
            'work item", use "Issue". If they say "bug", use "Bug". If they say "task", use "Task".',
            required=True,
        ),
        _p("title", "string", "Title of the work item", required=True),
        _p("description", "string", "Optional description"),
        _p("additionalFields", "object", "Additional fields as key-value pairs"),
        _project(),
    ),
    _tool(
        "update_work_item",
        "Update fields of an existing work item in Azure DevOps. Provide the work item ID "
        "and a fields object with field names (e.g., System.Description) and new values. "
        "You can also add an optional comment. Common field mappings: \"description\" -> "
        "System.Description, \"title\" -> System.Title, \"state\" -> System.State, "
        "\"assigned to\" -> System.AssignedTo.",
        _work_item_id("ID of the work item to update"),
        _p(
            "fields",
            "object",
            'Fields to update as key-value pairs (e.g., {"System.Description": "new description", '
            '"System.Title": "new title"}). If the user mentions a field like "description", '
            "map it to System.Description.",
            required=True,
        ),
        _p("comment", "string", "Optional comment for the history"),
        _project(),
    ),
    _tool(
        "assign_work_item",
        "Assign a work item to a user. Provide the work item ID and the assignee (user "
        "display name or email). Optionally add a comment.",
        _work_item_id("ID of the work item to assign"),
        _p(
            "assignee",
            "string",
            'User to assign the work item to (e.g., "John Doe", "john@example.com")',
            required=True,
        ),
        _p("comment", "string", "Optional comment for the history"),
        _project(),
    ),
    _tool(
        "list_repositories",
        "List repositories in a project (default project used if not specified)",
        _project(),
    ),
    _tool("list_branches", "List branches in a repository", _repository_id(), _project()),
    _tool(
        "list_pull_requests",
        "List pull requests in a repository or project",
        _repository_id(required=False),
        _project(),
        _p("top", "integer", "Number of pull requests to retrieve (default 100)", default=100),
        _p(
            "status",
            "string",
            "Pull request status (active, completed, abandoned). Default active.",
            default="active",
        ),
    ),
    _tool(
        "get_pull_request",
        "Get details of a specific pull request",
        _repository_id(),
        _p("pullRequestId", "integer", "Pull request ID", required=True),
        _project(),
    ),
    _tool(
        "search_code",
        "Search for code across repositories",
        _p("searchText", "string", "Search text", required=True),
        _project(),
        _p("repository", "string", "Optional repository name or ID to filter"),
        _p("top", "integer", "Number of results to retrieve (default 5)", default=5),
    ),
    _tool(
        "search_work_items",
        "Search for work items using text search",
        _p("searchText", "string", "Search text", required=True),
        _project(),
        _p("top", "integer", "Number of results to retrieve (default 10)", default=10),
    ),
    _tool("list_wikis", "List wikis in a project", _project()),
    _tool(
        "get_wiki_page",
        "Get content of a wiki page",
        _p("wikiIdentifier", "string", "Wiki identifier (ID or name)", required=True),
        _project(),
        _p("path", "string", 'Wiki page path (default "/")', default="/"),
    ),
    _tool("list_team_iterations", "List iterations for a team", _project(required=True), _team()),
    _tool("list_test_plans", "List test plans in a project", _project(required=True)),
    _tool("get_current_user", "Get the currently authenticated user details"),
    _tool("list_work_item_types", "List work item types available in a project", _project()),
    _tool("list_iterations", "List iterations (sprints) for a project", _project()),
    _tool("list_build_definitions", "List build definitions (pipelines) for a project", _project()),
    _tool("list_release_definitions", "List release definitions for a project", _project()),
    _tool("list_queries", "List saved work item queries in a project", _project()),
    _tool("get_work_item_revisions", "Get revision history of a work item", _work_item_id(), _project()),
    _tool("get_work_item_links", "Get links (relations) of a work item", _work_item_id(), _project()),
    _tool(
        "create_pull_request",
        "Create a new pull request",
        _repository_id(),
        _p("sourceBranch", "string", "Source branch name (without refs/heads/)", required=True),
        _p("targetBranch", "string", "Target branch name (without refs/heads/)", required=True),
        _p("title", "string", "Pull request title", required=True),
        _p("description", "string", "Optional description"),
        _project(),
    ),
    _tool(
        "list_commits",
        "List commits in a repository",
        _repository_id(),
        _project(),
        _p("top", "integer", "Number of commits to retrieve (default 10)", default=10),
    ),
    _tool(
        "get_file_content",
        "Get content of a file in a repository",
        _repository_id(),
        _p("path", "string", "File path within repository", required=True),
        _project(),
    ),
    _tool("list_areas", "List areas (classification nodes) in a project", _project()),
    _tool(
        "list_iteration_capacities",
        "Get capacity for a team iteration",
        _project(required=True),
        _team(),
        _p("iterationId", "string", "Iteration ID", required=True),
    ),
    _tool("list_work_item_categories", "List work item categories in a project", _project()),
    _tool("list_dashboards", "List dashboards in a project", _project()),
    _tool("list_pipelines", "List pipelines (YAML pipelines) in a project", _project()),
    _tool(
        "list_test_suites",
        "List test suites in a test plan",
        _project(required=True),
        _p("planId", "integer", "Test plan ID", required=True),
    ),
    _tool("list_variable_groups", "List variable groups for pipelines", _project()),
    _tool("list_service_endpoints", "List service endpoints (service connections)", _project()),
    _tool("list_tags", "List tags in a project", _project()),
    _tool("list_team_members", "List members of a team", _project(required=True), _team()),
    _tool("list_boards", "List boards (work item boards) for a team", _project(required=True), _team()),
    _tool("list_board_columns", "List columns of a board", _project(required=True), _team(), _board()),
    _tool("list_board_rows", "List rows of a board", _project(required=True), _team(), _board()),
    _tool(
        "list_work_item_states",
        "List states for a work item type",
        _project(required=True),
        _p("workItemType", "string", "Work item type (e.g., Bug, Task, User Story)", required=True),
    ),
    _tool("list_work_item_fields", "List work item fields (metadata)", _project()),
    _tool("list_work_item_updates", "List updates (history) for a work item", _work_item_id(), _project()),
    _tool("list_work_item_attachments", "List attachments for a work item", _work_item_id(), _project()),
    _tool("list_work_item_comments", "List comments for a work item", _work_item_id(), _project()),
    _tool("list_work_item_relations", "List relations (links) for a work item", _work_item_id(), _project()),
    _tool(
        "list_work_item_query_results",
        "Run a saved query and get results",
        _project(required=True),
        _p("queryId", "string", "Query ID (GUID) or path", required=True),
    ),
)

_BY_NAME: Dict[str, ToolDescriptor] = {}
for _descriptor in TOOLS:
    if _descriptor.name in _BY_NAME:
        raise ValueError(f"Duplicate tool name detected: {_descriptor.name}")
    _BY_NAME[_descriptor.name] = _descriptor
del _descriptor


def get_tool(name: str) -> Optional[ToolDescriptor]:
    return _BY_NAME.get(name)


def tool_names() -> Tuple[str, ...]:
    return tuple(d.name for d in TOOLS)


__all__ = ["DEFAULT_PROJECT_HINT", "TOOLS", "get_tool", "tool_names"]
