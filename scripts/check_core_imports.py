#!/usr/bin/env python3
"""
Layering guard for src/azdo_mcp/core/.
- core never imports transport libraries (Starlette, FastMCP, uvicorn)
- backend operations under core/tools only talk to the client layer
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path
from typing import Iterator, Tuple

REPO_ROOT = Path(__file__).resolve().parent.parent
CORE_DIR = REPO_ROOT / "src" / "azdo_mcp" / "core"
TOOLS_DIR = CORE_DIR / "tools"

FORBIDDEN_IN_CORE = (
    "fastapi",
    "starlette",
    "uvicorn",
    "mcp.server",
    "fastmcp",
    "azdo_mcp.transports",
)

FORBIDDEN_IN_TOOLS = (
    "openai",
    "azdo_mcp.core.assistant",
    "azdo_mcp.core.dispatcher",
    "azdo_mcp.core.formatters",
    "azdo_mcp.core.registry",
)


def _matches(module: str, prefixes: Tuple[str, ...]) -> bool:
    return any(
        module == prefix or module.startswith(prefix + ".") for prefix in prefixes
    )


def _imported_modules(path: Path) -> Iterator[str]:
    tree = ast.parse(path.read_text())
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield alias.name
        elif isinstance(node, ast.ImportFrom) and node.module and not node.level:
            yield node.module


def scan_file(path: Path) -> list[str]:
    forbidden = FORBIDDEN_IN_CORE
    if TOOLS_DIR in path.parents:
        forbidden = FORBIDDEN_IN_CORE + FORBIDDEN_IN_TOOLS
    return [
        f"{path}: forbidden import '{mod}'"
        for mod in _imported_modules(path)
        if _matches(mod, forbidden)
    ]


def main() -> int:
    violations: list[str] = []
    for py_file in sorted(CORE_DIR.rglob("*.py")):
        violations.extend(scan_file(py_file))

    if violations:
        for v in violations:
            print(v, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
