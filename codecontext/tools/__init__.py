"""
MCP tool implementations.

Each tool is a plain synchronous function that analyzes the target
directory, reads the published graph, and returns Markdown text. Errors are
raised as ``ToolError`` subclasses.
"""

from codecontext.tools.dependencies import get_dependencies
from codecontext.tools.files import get_file_analysis
from codecontext.tools.frameworks import get_framework_analysis
from codecontext.tools.overview import get_codebase_overview
from codecontext.tools.semantic import get_semantic_neighborhoods
from codecontext.tools.symbols import get_symbol_info, search_symbols
from codecontext.tools.watch import watch_changes

__all__ = [
    "get_codebase_overview",
    "get_dependencies",
    "get_file_analysis",
    "get_framework_analysis",
    "get_semantic_neighborhoods",
    "get_symbol_info",
    "search_symbols",
    "watch_changes",
]
