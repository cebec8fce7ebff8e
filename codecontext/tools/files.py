"""
File Analysis Tool
"""

import threading
from typing import Optional

from codecontext.configs.logging import get_logger
from codecontext.graph.store import path_from_node_id
from codecontext.tools.common import refresh, require, resolve_file

logger = get_logger("tools.files")


def get_file_analysis(
    file_path: str,
    target_dir: str = "",
    cancel_event: Optional[threading.Event] = None,
) -> str:
    """
    Detailed view of one file: language, size, symbols, and resolved imports.

    Raises:
        InvalidArgumentError: If ``file_path`` is empty
        NotFoundError: If the file was not analyzed
    """
    file_path = require(file_path, "file_path")
    graph = refresh(target_dir, cancel_event)
    key = resolve_file(graph, file_path)
    file_node = graph.files[key]
    rel = graph.relative_path(key)

    lines = [
        f"# File Analysis: {rel}",
        "",
        f"**Language:** {file_node.language}",
        f"**Lines:** {file_node.lines}",
        f"**Symbols:** {file_node.symbol_count}",
        "",
        "## Symbols",
        "",
    ]
    for symbol in graph.symbols_in_file(key):
        lines.append(f"- **{symbol.name}** ({symbol.display_type}) - Line {symbol.location.start_line}")

    lines += ["", "## Dependencies", ""]
    imports = graph.imports_of(key)
    if imports:
        lines += ["### Imports:", ""]
        for edge in imports:
            lines.append(f"- {graph.relative_path(path_from_node_id(edge.target))}")
    else:
        lines.append("No imports found.")
    return "\n".join(lines) + "\n"
