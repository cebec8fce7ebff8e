"""
Dependency Tool

``get_dependencies``: imports and dependents of one file, or a global
overview of the import graph.
"""

import threading
from collections import Counter
from typing import Optional

from codecontext.configs.logging import get_logger
from codecontext.exceptions import InvalidArgumentError
from codecontext.graph.models import EdgeType
from codecontext.graph.store import CodeGraph, path_from_node_id
from codecontext.tools.common import refresh, resolve_file

logger = get_logger("tools.dependencies")

DIRECTIONS = ("", "imports", "dependents", "both")
TOP_IMPORTED = 5


def get_dependencies(
    file_path: str = "",
    direction: str = "",
    target_dir: str = "",
    cancel_event: Optional[threading.Event] = None,
) -> str:
    """
    Import relationships for ``file_path``, or for the whole codebase when empty.

    Args:
        file_path: File to inspect (absolute or relative to the target)
        direction: ``imports``, ``dependents``, or empty for both
        target_dir: Directory to analyze (default: configured target)

    Raises:
        InvalidArgumentError: If ``direction`` is not recognized
        NotFoundError: If ``file_path`` was not analyzed
    """
    direction = (direction or "").strip().lower()
    if direction not in DIRECTIONS:
        raise InvalidArgumentError(
            f"invalid direction: {direction}",
            {"allowed": ["imports", "dependents"]},
        )

    graph = refresh(target_dir, cancel_event)
    lines = ["# Dependency Analysis", ""]
    if file_path:
        lines += _file_dependencies(graph, resolve_file(graph, file_path), direction)
    else:
        lines += _global_dependencies(graph)
    return "\n".join(lines) + "\n"


def _file_dependencies(graph: CodeGraph, key: str, direction: str) -> list[str]:
    lines = [f"## Dependencies for: {graph.relative_path(key)}", ""]

    if direction != "dependents":
        lines.append("### Imports:")
        imports = graph.imports_of(key)
        if imports:
            for edge in imports:
                lines.append(f"- {graph.relative_path(path_from_node_id(edge.target))}")
        else:
            lines.append("No imports found.")

    if direction != "imports":
        lines.append("\n### Dependents (files that import this):")
        dependents = graph.dependents_of(key)
        if dependents:
            for edge in dependents:
                lines.append(f"- {graph.relative_path(path_from_node_id(edge.source))}")
        else:
            lines.append("No dependents found.")
    return lines


def _global_dependencies(graph: CodeGraph) -> list[str]:
    edges = list(graph.iter_edges(EdgeType.IMPORTS))
    lines = [
        "## Global Dependency Overview",
        "",
        f"- **Total Files:** {len(graph.files)}",
        f"- **Total Import Relationships:** {len(edges)}",
    ]
    counts = Counter(path_from_node_id(edge.target) for edge in edges)
    if counts:
        lines.append("\n### Most Imported Files:")
        for path, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[:TOP_IMPORTED]:
            lines.append(f"- {graph.relative_path(path)} ({count} imports)")
    return lines
