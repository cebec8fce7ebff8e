"""
Overview Tool

``get_codebase_overview``: the rendered context map, optionally followed by
the statistics of that same graph as JSON.
"""

import json
import threading
from typing import Optional

from codecontext.analyzer.builder import stats_for
from codecontext.configs.logging import get_logger
from codecontext.render import MarkdownGenerator
from codecontext.tools.common import refresh

logger = get_logger("tools.overview")


def get_codebase_overview(
    include_stats: bool = False,
    target_dir: str = "",
    cancel_event: Optional[threading.Event] = None,
) -> str:
    """
    Analyze the target directory and return its context map.

    Args:
        include_stats: Append a JSON block with file, symbol, and language counts
        target_dir: Directory to analyze (default: configured target)
    """
    logger.info(f"get_codebase_overview: target_dir={target_dir!r}, include_stats={include_stats}")
    graph = refresh(target_dir, cancel_event)
    content = MarkdownGenerator(graph).generate_context_map()

    if include_stats:
        stats = stats_for(graph)
        content += "\n\n## Detailed Statistics\n```json\n" + json.dumps(stats, indent=2, default=str) + "\n```"
    return content
