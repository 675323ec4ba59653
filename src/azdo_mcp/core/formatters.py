"""
Render backend payloads as short Markdown for agents and chat users.

One entry point, `format_result`, used identically by the MCP tools, the
HTTP tool endpoint and the chat assistant. Pure: no I/O, no state, and it
never raises for an unexpected payload shape (it falls back to JSON).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .records import dig, field

Accessor = Callable[[Dict[str, Any]], Any]


@dataclass(frozen=True)
class Column:
    header: str
    accessor: Accessor


@dataclass(frozen=True)
class ListTemplate:
    title: str
    empty: str
    columns: Tuple[Column, ...]


def _at(*path: Any) -> Accessor:
    return lambda record: dig(record, *path)


def _fields(name: str, *rest: Any) -> Accessor:
    return lambda record: field(record, name, *rest)


def _short(*path: Any, length: int = 8) -> Accessor:
    return lambda record: str(dig(record, *path))[:length]


def _flag(key: str, when_true: str, when_false: str) -> Accessor:
    return lambda record: when_true if dig(record, key, default=False) else when_false


def _match_count(record: Dict[str, Any]) -> str:
    matches = record.get("matches")
    if isinstance(matches, dict):
        total = sum(len(v) for v in matches.values() if isinstance(v, list))
    elif isinstance(matches, list):
        total = len(matches)
    else:
        total = 0
    return f"{total} matches"


def _date_range(record: Dict[str, Any]) -> str:
    start = dig(record, "attributes", "startDate")
    finish = dig(record, "attributes", "finishDate")
    return f"{start} - {finish}"


def _listed(record: Dict[str, Any], key: str) -> List[Any]:
    value = record.get(key)
    return value if isinstance(value, list) else []


def _activities(record: Dict[str, Any]) -> str:
    names = [dig(a, "name") for a in _listed(record, "activities") if isinstance(a, dict)]
    return ", ".join(str(n) for n in names if n)


def _days_off(record: Dict[str, Any]) -> str:
    return f"{len(_listed(record, 'daysOff'))} days off"


def _cols(*pairs: Tuple[str, Accessor]) -> Tuple[Column, ...]:
    return tuple(Column(header, accessor) for header, accessor in pairs)


WORK_ITEM_COLUMNS = _cols(
    ("ID", _at("id")),
    ("Title", _fields("System.Title")),
    ("State", _fields("System.State")),
    ("Assigned To", _fields("System.AssignedTo", "displayName")),
    ("Type", _fields("System.WorkItemType")),
)

RELATION_COLUMNS = _cols(
    ("Relation", _at("rel")),
    ("URL", _at("url")),
    ("Name", _at("attributes", "name")),
)

ITERATION_COLUMNS = _cols(
    ("ID", _at("id")),
    ("Name", _at("name")),
    ("Path", _at("path")),
    ("Dates", _date_range),
)


LIST_TEMPLATES: Dict[str, ListTemplate] = {
    "list_projects": ListTemplate(
        "Projects",
        "No projects found.",
        _cols(("ID", _at("id")), ("Name", _at("name")), ("Description", _at("description")), ("URL", _at("url"))),
    ),
    "list_project_teams": ListTemplate(
        "Teams",
        "No teams found.",
        _cols(("ID", _at("id")), ("Name", _at("name")), ("Description", _at("description")), ("Project", _at("projectName"))),
    ),
    "get_identity_ids": ListTemplate(
        "Identities",
        "No identities found.",
        _cols(
            ("Local ID", _at("id")),
            ("Display Name", _at("providerDisplayName")),
            ("Unique Name", _at("properties", "Account", "$value")),
            ("Subject Descriptor", _at("subjectDescriptor")),
        ),
    ),
    "query_work_items": ListTemplate("Work Items", "No work items match the query.", WORK_ITEM_COLUMNS),
    "get_work_items_by_ids": ListTemplate("Work Items", "No work items found with those IDs.", WORK_ITEM_COLUMNS),
    "list_work_item_query_results": ListTemplate("Query Results", "No work items found for this query.", WORK_ITEM_COLUMNS),
    "get_builds": ListTemplate(
        "Builds",
        "No builds found.",
        _cols(
            ("ID", _at("id")),
            ("Build Number", _at("buildNumber")),
            ("Status", _at("status")),
            ("Result", _at("result")),
            ("Queue Time", _at("queueTime")),
            ("Branch", _at("sourceBranch")),
        ),
    ),
    "get_releases": ListTemplate(
        "Releases",
        "No releases found.",
        _cols(
            ("ID", _at("id")),
            ("Name", _at("name")),
            ("Status", _at("status")),
            ("Created", _at("createdOn")),
            ("Modified", _at("modifiedOn")),
        ),
    ),
    "list_repositories": ListTemplate(
        "Repositories",
        "No repositories found.",
        _cols(
            ("ID", _at("id")),
            ("Name", _at("name")),
            ("Status", _flag("isDisabled", "Disabled", "Active")),
            ("Fork", _flag("isFork", "Fork", "No")),
            ("URL", _at("webUrl")),
        ),
    ),
    "list_branches": ListTemplate(
        "Branches",
        "No branches found.",
        _cols(("Name", _at("name")), ("Commit", _short("objectId")), ("Creator", _at("creator", "displayName"))),
    ),
    "list_pull_requests": ListTemplate(
        "Pull Requests",
        "No pull requests found.",
        _cols(
            ("ID", _at("pullRequestId")),
            ("Title", _at("title")),
            ("Status", _at("status")),
            ("Created By", _at("createdBy", "displayName")),
            ("Created", _at("creationDate")),
        ),
    ),
    "search_code": ListTemplate(
        "Code Search Results",
        "No code search results found.",
        _cols(
            ("Project", _at("project", "name")),
            ("Repository", _at("repository", "name")),
            ("Path", _at("path")),
            ("Matches", _match_count),
        ),
    ),
    "search_work_items": ListTemplate(
        "Work Item Search Results",
        "No work item search results found.",
        _cols(
            ("ID", _fields("system.id")),
            ("Title", _fields("system.title")),
            ("State", _fields("system.state")),
            ("Type", _fields("system.workitemtype")),
        ),
    ),
    "list_wikis": ListTemplate(
        "Wikis",
        "No wikis found.",
        _cols(("ID", _at("id")), ("Name", _at("name")), ("Type", _at("type")), ("Project ID", _at("projectId"))),
    ),
    "list_team_iterations": ListTemplate("Iterations", "No iterations found for this team.", ITERATION_COLUMNS),
    "list_iterations": ListTemplate("Iterations", "No iterations found.", ITERATION_COLUMNS),
    "list_test_plans": ListTemplate(
        "Test Plans",
        "No test plans found.",
        _cols(
            ("ID", _at("id")),
            ("Name", _at("name")),
            ("Description", _at("description")),
            ("Area Path", _at("areaPath")),
            ("Iteration", _at("iteration")),
        ),
    ),
    "list_work_item_types": ListTemplate(
        "Work Item Types",
        "No work item types found.",
        _cols(("Name", _at("name")), ("Reference Name", _at("referenceName")), ("Description", _at("description"))),
    ),
    "list_build_definitions": ListTemplate(
        "Build Definitions",
        "No build definitions found.",
        _cols(("ID", _at("id")), ("Name", _at("name")), ("Path", _at("path")), ("Queue Status", _at("queueStatus"))),
    ),
    "list_release_definitions": ListTemplate(
        "Release Definitions",
        "No release definitions found.",
        _cols(
            ("ID", _at("id")),
            ("Name", _at("name")),
            ("Path", _at("path")),
            ("Release Name Format", _at("releaseNameFormat")),
        ),
    ),
    "list_queries": ListTemplate(
        "Queries",
        "No queries found.",
        _cols(("ID", _at("id")), ("Name", _at("name")), ("Path", _at("path")), ("Type", _flag("isFolder", "Folder", "Query"))),
    ),
    "get_work_item_revisions": ListTemplate(
        "Work Item Revisions",
        "No revisions found for this work item.",
        _cols(
            ("Rev", _at("rev")),
            ("Changed Date", _fields("System.ChangedDate")),
            ("Changed By", _fields("System.ChangedBy", "displayName")),
            ("State", _fields("System.State")),
        ),
    ),
    "get_work_item_links": ListTemplate("Work Item Links", "No links found for this work item.", RELATION_COLUMNS),
    "list_work_item_relations": ListTemplate(
        "Work Item Relations", "No relations found for this work item.", RELATION_COLUMNS
    ),
    "list_commits": ListTemplate(
        "Commits",
        "No commits found.",
        _cols(
            ("Commit", _short("commitId")),
            ("Author", _at("author", "name")),
            ("Message", _at("comment")),
            ("Date", _at("committer", "date")),
        ),
    ),
    "list_areas": ListTemplate(
        "Areas",
        "No areas found.",
        _cols(("ID", _at("id")), ("Name", _at("name")), ("Path", _at("path")), ("Type", _at("structureType"))),
    ),
    "list_iteration_capacities": ListTemplate(
        "Iteration Capacities",
        "No capacities found for this iteration.",
        _cols(
            ("Team Member", _at("teamMember", "displayName")),
            ("Activities", _activities),
            ("Days Off", _days_off),
        ),
    ),
    "list_work_item_categories": ListTemplate(
        "Work Item Categories",
        "No work item categories found.",
        _cols(
            ("Name", _at("name")),
            ("Reference Name", _at("referenceName")),
            ("Default Work Item Type", _at("defaultWorkItemType", "name")),
        ),
    ),
    "list_dashboards": ListTemplate(
        "Dashboards",
        "No dashboards found.",
        _cols(
            ("ID", _at("id")),
            ("Name", _at("name")),
            ("Description", _at("description")),
            ("Modified", _at("modifiedDate")),
        ),
    ),
    "list_pipelines": ListTemplate(
        "Pipelines",
        "No pipelines found.",
        _cols(("ID", _at("id")), ("Name", _at("name")), ("Folder", _at("folder")), ("Revision", _at("revision"))),
    ),
    "list_test_suites": ListTemplate(
        "Test Suites",
        "No test suites found.",
        _cols(
            ("ID", _at("id")),
            ("Name", _at("name")),
            ("Test Cases", lambda r: f"{dig(r, 'testCaseCount', default=0) or 0} test cases"),
            ("Type", _at("suiteType")),
        ),
    ),
    "list_variable_groups": ListTemplate(
        "Variable Groups",
        "No variable groups found.",
        _cols(
            ("ID", _at("id")),
            ("Name", _at("name")),
            ("Description", _at("description")),
            ("Project", _at("variableGroupProjectReferences", 0, "projectReference", "name")),
        ),
    ),
    "list_service_endpoints": ListTemplate(
        "Service Endpoints",
        "No service endpoints found.",
        _cols(("ID", _at("id")), ("Name", _at("name")), ("Type", _at("type")), ("Status", _flag("isReady", "Ready", "Not Ready"))),
    ),
    "list_tags": ListTemplate(
        "Tags",
        "No tags found.",
        _cols(
            ("ID", _at("id")),
            ("Name", _at("name")),
            ("Status", lambda r: "Inactive" if r.get("active") is False else "Active"),
        ),
    ),
    "list_team_members": ListTemplate(
        "Team Members",
        "No team members found.",
        _cols(
            ("Display Name", _at("identity", "displayName")),
            ("Unique Name", _at("identity", "uniqueName")),
            ("ID", _at("identity", "id")),
        ),
    ),
    "list_boards": ListTemplate(
        "Boards",
        "No boards found.",
        _cols(("ID", _at("id")), ("Name", _at("name")), ("Description", _at("description"))),
    ),
    "list_board_columns": ListTemplate(
        "Board Columns",
        "No board columns found.",
        _cols(
            ("ID", _at("id")),
            ("Name", _at("name")),
            ("Item Limit", lambda r: dig(r, "itemLimit", default=0) or "No limit"),
            ("Type", _at("columnType")),
        ),
    ),
    "list_board_rows": ListTemplate(
        "Board Rows",
        "No board rows found.",
        _cols(("ID", _at("id")), ("Name", _at("name")), ("Rank", _at("rank"))),
    ),
    "list_work_item_states": ListTemplate(
        "Work Item States",
        "No work item states found.",
        _cols(("Name", _at("name")), ("Category", _at("category")), ("Color", _at("color")), ("Order", _at("order"))),
    ),
    "list_work_item_fields": ListTemplate(
        "Work Item Fields",
        "No work item fields found.",
        _cols(
            ("Reference Name", _at("referenceName")),
            ("Name", _at("name")),
            ("Type", _at("type")),
            ("Access", _flag("readOnly", "Read-only", "Editable")),
        ),
    ),
    "list_work_item_updates": ListTemplate(
        "Work Item Updates",
        "No updates found for this work item.",
        _cols(
            ("Update ID", _at("id")),
            ("Revision", _at("rev")),
            ("Changed Date", _fields("System.ChangedDate", "newValue")),
            ("Changed By", _fields("System.ChangedBy", "newValue", "displayName")),
        ),
    ),
    "list_work_item_attachments": ListTemplate(
        "Work Item Attachments",
        "No attachments found for this work item.",
        _cols(("ID", _at("id")), ("Name", _at("name")), ("Size", _at("size")), ("Created Date", _at("createdDate"))),
    ),
    "list_work_item_comments": ListTemplate(
        "Work Item Comments",
        "No comments found for this work item.",
        _cols(
            ("ID", _at("id")),
            ("Text", _at("text")),
            ("Created By", _at("createdBy", "displayName")),
            ("Created Date", _at("createdDate")),
        ),
    ),
}


# --- cell / table rendering ------------------------------------------------ #


def cell(value: Any) -> str:
    """Render one table cell: `|` escaped, newlines collapsed to spaces."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        text = json.dumps(value, ensure_ascii=False, default=str)
    else:
        text = str(value)
    return " ".join(text.split()).replace("|", "\\|")


def render_table(template: ListTemplate, records: Sequence[Any]) -> str:
    if not records:
        return template.empty
    headers = [c.header for c in template.columns]
    lines = [
        f"## {template.title} ({len(records)})",
        "| " + " | ".join(headers) + " |",
        "|" + "|".join("-" * (len(h) + 2) for h in headers) + "|",
    ]
    for record in records:
        row = record if isinstance(record, dict) else {}
        lines.append("| " + " | ".join(cell(c.accessor(row)) for c in template.columns) + " |")
    return "\n".join(lines)


def format_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)


# --- detail and mutation blocks ------------------------------------------- #


def _block(*lines: Optional[str]) -> str:
    return "\n".join(line for line in lines if line is not None)


def _line(label: str, value: Any) -> str:
    return f"{label}: {'' if value is None else value}"


def _optional_line(label: str, value: Any) -> Optional[str]:
    if isinstance(value, str):
        value = value.strip()
    return _line(label, value) if value else None


def _pull_request(payload: Dict[str, Any], arguments: Mapping[str, Any]) -> str:
    author = dig(payload, "createdBy", "displayName")
    unique = dig(payload, "createdBy", "uniqueName")
    return _block(
        f"## Pull Request {dig(payload, 'pullRequestId')}",
        _line("Title", dig(payload, "title")),
        _line("Repository", dig(payload, "repository", "name")),
        _line("Status", dig(payload, "status")),
        _line("Created By", f"{author} ({unique})" if unique else author),
        _line("Created", dig(payload, "creationDate")),
        _line("Source", dig(payload, "sourceRefName")),
        _line("Target", dig(payload, "targetRefName")),
        _optional_line("Description", payload.get("description")),
    )


def _current_user(payload: Dict[str, Any], arguments: Mapping[str, Any]) -> str:
    return _block(
        "## Current User",
        _line("ID", dig(payload, "id")),
        _line("Display Name", dig(payload, "displayName")),
        _line("Unique Name", dig(payload, "uniqueName")),
        _line("Email", payload.get("email") or "N/A"),
    )


def _wiki_page(payload: str, arguments: Mapping[str, Any]) -> str:
    return f"## Wiki Page: {arguments.get('path') or '/'}\n{payload}"


def _file_content(payload: str, arguments: Mapping[str, Any]) -> str:
    return f"## File: {arguments.get('path') or ''}\n```\n{payload}\n```"


def _created_work_item(payload: Dict[str, Any], arguments: Mapping[str, Any]) -> str:
    return _block(
        "✅ Work item created successfully!",
        _line("ID", payload.get("id")),
        _line("Type", arguments.get("workItemType")),
        _line("Title", arguments.get("title")),
        _optional_line("URL", payload.get("url")),
        _optional_line("Description", arguments.get("description")),
    )


def _updated_work_item(payload: Dict[str, Any], arguments: Mapping[str, Any]) -> str:
    fields = arguments.get("fields") or {}
    changed = [f"- {name}: {value}" for name, value in fields.items()] if isinstance(fields, dict) else []
    return _block(
        f"✅ Work item {payload.get('id', arguments.get('id'))} updated successfully!",
        "Updated fields:",
        *changed,
        _optional_line("Comment", arguments.get("comment")),
    )


def _assigned_work_item(payload: Dict[str, Any], arguments: Mapping[str, Any]) -> str:
    return _block(
        f"✅ Work item {payload.get('id', arguments.get('id'))} "
        f"assigned to {arguments.get('assignee')} successfully!",
        _optional_line("Comment", arguments.get("comment")),
    )


def _created_pull_request(payload: Dict[str, Any], arguments: Mapping[str, Any]) -> str:
    return _block(
        "✅ Pull request created successfully!",
        _line("ID", payload.get("pullRequestId")),
        _line("Title", arguments.get("title")),
        _optional_line("Repository", dig(payload, "repository", "name")),
        _line("Source", arguments.get("sourceBranch")),
        _line("Target", arguments.get("targetBranch")),
        _line("Status", payload.get("status")),
        _optional_line("URL", payload.get("url")),
        _optional_line("Description", arguments.get("description")),
    )


Renderer = Callable[[Any, Mapping[str, Any]], str]

RECORD_RENDERERS: Dict[str, Tuple[type, Renderer]] = {
    "get_pull_request": (dict, _pull_request),
    "get_current_user": (dict, _current_user),
    "get_wiki_page": (str, _wiki_page),
    "get_file_content": (str, _file_content),
    "create_work_item": (dict, _created_work_item),
    "update_work_item": (dict, _updated_work_item),
    "assign_work_item": (dict, _assigned_work_item),
    "create_pull_request": (dict, _created_pull_request),
}


def format_result(
    tool_name: str, payload: Any, arguments: Optional[Mapping[str, Any]] = None
) -> str:
    """Render a tool's raw payload; the tool arguments feed confirmation blocks."""
    arguments = arguments or {}
    try:
        template = LIST_TEMPLATES.get(tool_name)
        if template is not None and isinstance(payload, list):
            return render_table(template, payload)
        renderer = RECORD_RENDERERS.get(tool_name)
        if renderer is not None:
            expected, render = renderer
            if isinstance(payload, expected):
                return render(payload, arguments)
    except (AttributeError, KeyError, TypeError, ValueError):
        # Shape the template did not anticipate
        pass
    return format_json(payload)


def templated_tools() -> List[str]:
    return sorted(set(LIST_TEMPLATES) | set(RECORD_RENDERERS))


__all__ = [
    "Column",
    "LIST_TEMPLATES",
    "ListTemplate",
    "RECORD_RENDERERS",
    "cell",
    "format_json",
    "format_result",
    "render_table",
    "templated_tools",
]
