"""
Tool Helpers

Argument checks, analysis refresh, and path lookup shared by the MCP tools.
"""

import os
import threading
import time
from typing import Optional

from codecontext.configs.logging import get_logger
from codecontext.configs.services import get_server_state
from codecontext.exceptions import InvalidArgumentError, NotFoundError
from codecontext.graph.store import CodeGraph

logger = get_logger("tools")


def require(value: str, name: str) -> str:
    """
    Raises:
        InvalidArgumentError: If ``value`` is empty
    """
    if not value or not value.strip():
        raise InvalidArgumentError(f"{name} is required")
    return value.strip()


def refresh(target_dir: str = "", cancel_event: Optional[threading.Event] = None) -> CodeGraph:
    """Analyze the resolved target directory and return the published graph."""
    start = time.monotonic()
    graph = get_server_state().refresh_analysis(target_dir or None, cancel_event=cancel_event)
    logger.debug(f"Refreshed analysis in {time.monotonic() - start:.2f}s")
    return graph


def find_file(graph: CodeGraph, file_path: str) -> Optional[str]:
    """Graph key for an absolute or root-relative path, if the file was analyzed."""
    candidate = file_path.replace("\\", "/") if os.sep == "/" else file_path
    if not os.path.isabs(candidate):
        candidate = os.path.join(graph.root_dir, candidate)
    key = os.path.normpath(candidate)
    return key if key in graph.files else None


def resolve_file(graph: CodeGraph, file_path: str) -> str:
    """
    Raises:
        NotFoundError: If the file is not in the graph
    """
    key = find_file(graph, file_path)
    if key is None:
        raise NotFoundError(f"file not found: {file_path}")
    return key
