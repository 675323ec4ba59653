import json

import pytest

from azdo_mcp.core.catalog import tool_names
from azdo_mcp.core.formatters import (
    LIST_TEMPLATES,
    RECORD_RENDERERS,
    cell,
    format_result,
)

EMPTY_MESSAGES = {
    "list_projects": "No projects found.",
    "query_work_items": "No work items match the query.",
    "get_work_items_by_ids": "No work items found with those IDs.",
    "list_work_item_query_results": "No work items found for this query.",
    "get_work_item_revisions": "No revisions found for this work item.",
    "get_work_item_links": "No links found for this work item.",
    "list_work_item_relations": "No relations found for this work item.",
    "list_team_iterations": "No iterations found for this team.",
    "list_iteration_capacities": "No capacities found for this iteration.",
    "list_work_item_comments": "No comments found for this work item.",
    "search_code": "No code search results found.",
    "list_tags": "No tags found.",
}


def test_every_catalog_tool_has_a_template():
    templated = set(LIST_TEMPLATES) | set(RECORD_RENDERERS)
    assert templated == set(tool_names())


@pytest.mark.parametrize("tool", sorted(LIST_TEMPLATES))
def test_empty_list_renders_fixed_message(tool):
    text = format_result(tool, [])

    assert text == LIST_TEMPLATES[tool].empty
    assert text.startswith("No ")
    assert "\n" not in text


@pytest.mark.parametrize("tool,message", sorted(EMPTY_MESSAGES.items()))
def test_specific_empty_messages(tool, message):
    assert format_result(tool, []) == message


def test_work_item_table_has_fixed_columns_and_order():
    items = [
        {
            "id": 9,
            "fields": {
                "System.Title": "Second",
                "System.State": "Active",
                "System.AssignedTo": {"displayName": "Ada"},
                "System.WorkItemType": "Bug",
            },
        },
        {"id": 7, "fields": {"System.Title": "First"}},
    ]

    lines = format_result("query_work_items", items).splitlines()

    assert lines[0] == "## Work Items (2)"
    assert lines[1] == "| ID | Title | State | Assigned To | Type |"
    assert lines[2].startswith("|-")
    assert lines[3] == "| 9 | Second | Active | Ada | Bug |"
    assert lines[4] == "| 7 | First |  |  |  |"


def test_cells_tolerate_missing_and_unexpected_shapes():
    text = format_result("list_branches", [{"name": "main"}, "not-a-record"])

    lines = text.splitlines()
    assert lines[3] == "| main |  |  |"
    assert lines[4] == "|  |  |  |"


def test_cell_escapes_pipes_and_newlines():
    assert cell("a|b\nc") == "a\\|b c"
    assert cell(None) == ""
    assert cell(False) == "false"


def test_table_cells_with_markdown_breakers():
    text = format_result(
        "list_projects",
        [{"id": "p1", "name": "Ops | Infra", "description": "line one\nline two"}],
    )
    assert "| p1 | Ops \\| Infra | line one line two |  |" in text


def test_derived_columns():
    repos = format_result(
        "list_repositories",
        [{"id": "r1", "name": "api", "isDisabled": True, "isFork": False, "webUrl": "u"}],
    )
    assert "| r1 | api | Disabled | No | u |" in repos

    commits = format_result(
        "list_commits",
        [
            {
                "commitId": "0123456789abcdef",
                "author": {"name": "Ada"},
                "comment": "Fix",
                "committer": {"date": "2024-01-02"},
            }
        ],
    )
    assert "| 01234567 | Ada | Fix | 2024-01-02 |" in commits

    capacities = format_result(
        "list_iteration_capacities",
        [
            {
                "teamMember": {"displayName": "Ada"},
                "activities": [{"name": "Development"}, {"name": "Testing"}],
                "daysOff": [{"start": "a"}, {"start": "b"}],
            }
        ],
    )
    assert "| Ada | Development, Testing | 2 days off |" in capacities

    code = format_result(
        "search_code",
        [
            {
                "project": {"name": "Fabrikam"},
                "repository": {"name": "api"},
                "path": "/src/app.py",
                "matches": {"content": [{}, {}], "fileName": [{}]},
            }
        ],
    )
    assert "| Fabrikam | api | /src/app.py | 3 matches |" in code

    tags = format_result(
        "list_tags",
        [{"id": "t", "name": "x", "active": False}, {"id": "u", "name": "y"}],
    )
    assert "| t | x | Inactive |" in tags
    assert "| u | y | Active |" in tags


def test_pull_request_detail_block():
    text = format_result(
        "get_pull_request",
        {
            "pullRequestId": 17,
            "title": "Add login",
            "repository": {"name": "web"},
            "status": "active",
            "createdBy": {"displayName": "Ada", "uniqueName": "ada@contoso.com"},
            "creationDate": "2024-05-01",
            "sourceRefName": "refs/heads/feature",
            "targetRefName": "refs/heads/main",
            "description": None,
        },
    )

    assert text.splitlines() == [
        "## Pull Request 17",
        "Title: Add login",
        "Repository: web",
        "Status: active",
        "Created By: Ada (ada@contoso.com)",
        "Created: 2024-05-01",
        "Source: refs/heads/feature",
        "Target: refs/heads/main",
    ]


def test_current_user_block_uses_na_for_missing_email():
    text = format_result(
        "get_current_user",
        {"id": "u1", "displayName": "Ada", "uniqueName": "ada@contoso.com", "email": None},
    )
    assert text.splitlines()[-1] == "Email: N/A"


def test_text_payloads():
    assert format_result("get_wiki_page", "# Home", {"wikiIdentifier": "w"}) == (
        "## Wiki Page: /\n# Home"
    )
    assert format_result(
        "get_file_content", "x = 1", {"repositoryId": "r", "path": "/a.py"}
    ) == "## File: /a.py\n```\nx = 1\n```"


def test_mutation_blocks_omit_unsupplied_arguments():
    created = format_result(
        "create_work_item",
        {"id": 42},
        {"workItemType": "Task", "title": "T", "description": "D"},
    )
    assert created.splitlines() == [
        "✅ Work item created successfully!",
        "ID: 42",
        "Type: Task",
        "Title: T",
        "Description: D",
    ]

    assigned = format_result("assign_work_item", {"id": 3}, {"id": 3, "assignee": "Ada"})
    assert assigned == "✅ Work item 3 assigned to Ada successfully!"

    pr = format_result(
        "create_pull_request",
        {"pullRequestId": 8, "status": "active", "repository": {"name": "web"}},
        {"repositoryId": "r", "sourceBranch": "feature", "targetBranch": "main", "title": "T"},
    )
    assert pr.splitlines() == [
        "✅ Pull request created successfully!",
        "ID: 8",
        "Title: T",
        "Repository: web",
        "Source: feature",
        "Target: main",
        "Status: active",
    ]


@pytest.mark.parametrize(
    "tool,payload",
    [
        ("not_a_tool", {"a": 1}),
        ("list_projects", {"unexpected": "shape"}),
        ("get_pull_request", ["unexpected"]),
        ("get_wiki_page", {"content": "x"}),
    ],
)
def test_fallback_is_pretty_json(tool, payload):
    assert format_result(tool, payload) == json.dumps(payload, indent=2, ensure_ascii=False)


def test_formatting_is_pure():
    payload = [{"id": 1, "name": "a"}]
    arguments = {"project": "P"}

    first = format_result("list_wikis", payload, arguments)
    second = format_result("list_wikis", payload, arguments)

    assert first == second
    assert payload == [{"id": 1, "name": "a"}]
    assert arguments == {"project": "P"}


@pytest.mark.parametrize("comment", ["", "   ", None])
def test_blank_optional_arguments_get_no_line(comment):
    assigned = format_result(
        "assign_work_item", {"id": 3}, {"id": 3, "assignee": "Ada", "comment": comment}
    )
    created = format_result(
        "create_work_item",
        {"id": 4},
        {"workItemType": "Task", "title": "T", "description": comment},
    )

    assert assigned == "✅ Work item 3 assigned to Ada successfully!"
    assert not any(line.startswith("Description") for line in created.splitlines())


def test_non_list_capacity_details_are_tolerated():
    text = format_result(
        "list_iteration_capacities",
        [{"teamMember": {"displayName": "Ada"}, "activities": "dev", "daysOff": 3}],
    )
    assert "| Ada |  | 0 days off |" in text


def test_renderer_failure_falls_back_to_json(monkeypatch):
    def broken(payload, arguments):
        raise TypeError("unexpected shape")

    monkeypatch.setitem(RECORD_RENDERERS, "get_current_user", (dict, broken))
    payload = {"id": "u1"}

    assert format_result("get_current_user", payload) == json.dumps(payload, indent=2)
