"""
Symbol Tools

``get_symbol_info`` looks up symbols by exact name; ``search_symbols`` finds
them by name substring with optional type and framework filters.
"""

import os
import threading
from typing import Optional

from codecontext.configs.logging import get_logger
from codecontext.exceptions import NotFoundError
from codecontext.graph.models import Symbol
from codecontext.graph.store import CodeGraph
from codecontext.tools.common import refresh, require, resolve_file
from codecontext.tools.frameworks import framework_description, framework_insight, matches_framework

logger = get_logger("tools.symbols")

DEFAULT_SEARCH_LIMIT = 20


def get_symbol_info(
    symbol_name: str,
    file_path: str = "",
    framework_type: str = "",
    target_dir: str = "",
    cancel_event: Optional[threading.Event] = None,
) -> str:
    """
    Every symbol named ``symbol_name``, optionally limited to one file or framework sub-type.

    Raises:
        InvalidArgumentError: If ``symbol_name`` is empty
        NotFoundError: If no symbol matches, or ``file_path`` was not analyzed
    """
    symbol_name = require(symbol_name, "symbol_name")
    graph = refresh(target_dir, cancel_event)
    only_file = resolve_file(graph, file_path) if file_path else ""
    wanted_type = framework_type.strip().lower()

    matches = []
    for symbol, path in graph.iter_symbols():
        if symbol.name != symbol_name:
            continue
        if only_file and path != only_file:
            continue
        if wanted_type and (symbol.framework_type is None or symbol.framework_type.value != wanted_type):
            continue
        matches.append((symbol, path))

    if not matches:
        raise NotFoundError(f"symbol '{symbol_name}' not found")

    blocks = [_symbol_block(graph, symbol, path) for symbol, path in matches]
    return f"# Symbol Information: {symbol_name}\n\n" + "\n---\n\n".join(blocks)


def _symbol_block(graph: CodeGraph, symbol: Symbol, path: str) -> str:
    lines = [
        f"**File:** {graph.relative_path(path)}",
        f"**Line:** {symbol.location.start_line}",
        f"**Type:** {symbol.kind.value}",
    ]
    if symbol.framework_type is not None:
        lines.append(f"**Framework Type:** {symbol.framework_type.value}")
        description = framework_description(symbol)
        if description:
            lines.append(f"**Description:** {description}")
    if symbol.signature:
        lines.append(f"**Signature:** `{symbol.signature}`")
    if symbol.documentation:
        lines.append(f"**Documentation:** {symbol.documentation}")
    insight = framework_insight(symbol, graph.relative_path(path))
    if insight:
        lines.append(f"**Framework Insights:** {insight}")
    return "\n".join(lines) + "\n"


def search_symbols(
    query: str,
    file_type: str = "",
    symbol_type: str = "",
    framework_type: str = "",
    limit: int = DEFAULT_SEARCH_LIMIT,
    target_dir: str = "",
    cancel_event: Optional[threading.Event] = None,
) -> str:
    """
    Case-insensitive substring search over symbol names.

    Filters are AND'd: ``file_type`` matches a language or extension,
    ``symbol_type`` a kind or framework sub-type, and ``framework_type`` a
    framework name (react, vue, angular, svelte, next.js, flutter).

    Raises:
        InvalidArgumentError: If ``query`` is empty
    """
    query = require(query, "query")
    if limit <= 0:
        limit = DEFAULT_SEARCH_LIMIT
    graph = refresh(target_dir, cancel_event)

    needle = query.lower()
    wanted_file_type = file_type.strip().lower().lstrip(".")
    wanted_symbol_type = symbol_type.strip().lower()

    results = []
    for symbol, path in graph.iter_symbols():
        if needle not in symbol.name.lower():
            continue
        if wanted_file_type and not _matches_file_type(graph, path, wanted_file_type):
            continue
        if wanted_symbol_type and not _matches_symbol_type(symbol, wanted_symbol_type):
            continue
        if framework_type and not matches_framework(symbol, graph.relative_path(path), framework_type):
            continue
        results.append((symbol, path))
        if len(results) >= limit:
            break

    if not results:
        return f"No symbols found matching '{query}'"

    lines = [f"# Symbol Search Results: '{query}'", ""]
    if symbol_type or framework_type:
        filters = "**Filters Applied:** "
        if symbol_type:
            filters += f"Symbol Type: {symbol_type} "
        if framework_type:
            filters += f"Framework: {framework_type} "
        lines += [filters, ""]

    lines += [f"Found {len(results)} matches:", ""]
    for symbol, path in results:
        framework = f" [{symbol.framework_type.value}]" if symbol.framework_type is not None else ""
        lines.append(
            f"- **{symbol.name}**{framework} ({symbol.kind.value}) - "
            f"{graph.relative_path(path)}:{symbol.location.start_line}"
        )
        insight = framework_insight(symbol, graph.relative_path(path))
        if insight:
            lines.append(f"  *{insight}*")
    return "\n".join(lines) + "\n"


def _matches_file_type(graph: CodeGraph, path: str, wanted: str) -> bool:
    file_node = graph.files.get(path)
    if file_node is not None and file_node.language.lower() == wanted:
        return True
    return os.path.splitext(path)[1].lower().lstrip(".") == wanted


def _matches_symbol_type(symbol: Symbol, wanted: str) -> bool:
    if symbol.kind.value == wanted:
        return True
    return symbol.framework_type is not None and symbol.framework_type.value == wanted
