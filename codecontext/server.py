"""
CodeContext MCP Server

Exposes code graph analysis to AI assistants over MCP (stdio).

Environment variables:
    CODECONTEXT_DEBUG: Enable debug logging (default: false)
    CODECONTEXT_LOG_FILE: Log file path (default: $CODECONTEXT_DATA_PATH/codecontext.log)
    CODECONTEXT_TARGET_DIR: Default directory to analyze (default: cwd)
    CODECONTEXT_DEBOUNCE_MS: Watcher debounce in milliseconds (default: 500)
    CODECONTEXT_ENABLE_DART: Parse Dart files (default: false)
"""

import argparse
import asyncio
import os
import sys
import threading
from typing import Callable

from mcp.server.fastmcp import FastMCP

from codecontext.configs.logging import get_logger, setup_logging
from codecontext.configs.runtime import get_full_config
from codecontext.configs.services import reset_server_state
from codecontext.configs.yaml_config import create_default_config
from codecontext.tools import (
    dependencies,
    files,
    frameworks,
    overview,
    semantic,
    symbols,
    watch,
)

# Initialize logging
setup_logging()
logger = get_logger("server")

# --- Initialize MCP Server ---

mcp = FastMCP("CodeContext")


async def _run(fn: Callable[..., str], **kwargs) -> str:
    """Run a tool in a worker thread; cancelling the request stops the build."""
    cancel_event = threading.Event()
    try:
        return await asyncio.to_thread(fn, cancel_event=cancel_event, **kwargs)
    except asyncio.CancelledError:
        cancel_event.set()
        logger.info(f"{fn.__name__} cancelled")
        raise


# --- Tools ---


async def get_codebase_overview(include_stats: bool = False, target_dir: str = "") -> str:
    """
    Get comprehensive overview of a codebase. Optional target_dir parameter allows
    analyzing different projects (supports ~/path and absolute paths).

    Args:
        include_stats: Include detailed statistics
        target_dir: Directory to analyze (default: server's configured directory)
    """
    return await _run(overview.get_codebase_overview, include_stats=include_stats, target_dir=target_dir)


async def get_file_analysis(file_path: str, target_dir: str = "") -> str:
    """
    Get detailed analysis of a specific file: language, size, symbols, and imports.

    Args:
        file_path: Path to the file to analyze (absolute or relative to target_dir)
        target_dir: Directory to analyze (default: server's configured directory)
    """
    return await _run(files.get_file_analysis, file_path=file_path, target_dir=target_dir)


async def get_symbol_info(
    symbol_name: str,
    file_path: str = "",
    framework_type: str = "",
    target_dir: str = "",
) -> str:
    """
    Get detailed information about a specific symbol with framework-specific insights.

    Args:
        symbol_name: Name of the symbol
        file_path: Only report the symbol from this file
        framework_type: Filter by framework sub-type (component, hook, service, store, route, ...)
        target_dir: Directory to analyze (default: server's configured directory)
    """
    return await _run(
        symbols.get_symbol_info,
        symbol_name=symbol_name,
        file_path=file_path,
        framework_type=framework_type,
        target_dir=target_dir,
    )


async def search_symbols(
    query: str,
    file_type: str = "",
    symbol_type: str = "",
    framework_type: str = "",
    limit: int = 20,
    target_dir: str = "",
) -> str:
    """
    Search for symbols across the codebase with framework-aware filtering.

    Args:
        query: Substring of the symbol name
        file_type: Filter by language or extension (typescript, py, ...)
        symbol_type: Filter by symbol kind or framework sub-type (function, class, component, hook, ...)
        framework_type: Filter by framework (react, vue, angular, svelte, nextjs, flutter)
        limit: Maximum number of results (default 20)
        target_dir: Directory to analyze (default: server's configured directory)
    """
    return await _run(
        symbols.search_symbols,
        query=query,
        file_type=file_type,
        symbol_type=symbol_type,
        framework_type=framework_type,
        limit=limit,
        target_dir=target_dir,
    )


async def get_dependencies(file_path: str = "", direction: str = "", target_dir: str = "") -> str:
    """
    Get dependency relationships for a file, or a global overview when file_path is empty.

    Args:
        file_path: File to inspect (absolute or relative to target_dir)
        direction: "imports", "dependents", or empty for both
        target_dir: Directory to analyze (default: server's configured directory)
    """
    return await _run(
        dependencies.get_dependencies,
        file_path=file_path,
        direction=direction,
        target_dir=target_dir,
    )


async def watch_changes(enable: bool, target_dir: str = "") -> str:
    """
    Enable or disable real-time change tracking. Changed files trigger a re-analysis.

    Args:
        enable: True to start watching, False to stop
        target_dir: Directory to watch (default: server's configured directory)
    """
    return await _run(watch.watch_changes, enable=enable, target_dir=target_dir)


async def get_semantic_neighborhoods(
    file_path: str = "",
    include_basic: bool = False,
    include_quality: bool = False,
    max_results: int = 0,
    target_dir: str = "",
) -> str:
    """
    Get semantic code neighborhoods: files that change together in git history,
    grouped with hierarchical clustering.

    Args:
        file_path: Show neighborhoods and clusters containing this file
        include_basic: Include the basic co-change neighborhoods
        include_quality: Include clustering quality metrics
        max_results: Maximum neighborhoods and clusters to list (0 = unlimited)
        target_dir: Directory to analyze (default: server's configured directory)
    """
    return await _run(
        semantic.get_semantic_neighborhoods,
        file_path=file_path,
        include_basic=include_basic,
        include_quality=include_quality,
        max_results=max_results,
        target_dir=target_dir,
    )


async def get_framework_analysis(framework: str = "", include_stats: bool = False, target_dir: str = "") -> str:
    """
    Get framework-specific analysis: symbol distribution, insights, and key symbols.

    Args:
        framework: Focus on one framework (react, vue, angular, svelte, nextjs, flutter)
        include_stats: Include a per-framework symbol count overview
        target_dir: Directory to analyze (default: server's configured directory)
    """
    return await _run(
        frameworks.get_framework_analysis,
        framework=framework,
        include_stats=include_stats,
        target_dir=target_dir,
    )


# --- Register Tools ---

mcp.tool()(get_codebase_overview)
mcp.tool()(get_file_analysis)
mcp.tool()(get_symbol_info)
mcp.tool()(search_symbols)
mcp.tool()(get_dependencies)
mcp.tool()(watch_changes)
mcp.tool()(get_semantic_neighborhoods)
mcp.tool()(get_framework_analysis)


# --- Entry Point ---


def main():
    """Main entry point for the MCP server."""
    parser = argparse.ArgumentParser(description="CodeContext MCP Server")
    parser.add_argument(
        "--target-dir",
        default=None,
        help="Directory to analyze (default: CODECONTEXT_TARGET_DIR or cwd)",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Re-analyze automatically when files change",
    )
    parser.add_argument(
        "--debounce-ms",
        type=int,
        default=None,
        help="Watcher debounce in milliseconds",
    )
    parser.add_argument(
        "--enable-dart",
        action="store_true",
        help="Parse Dart/Flutter files",
    )
    parser.add_argument(
        "--init",
        action="store_true",
        help="Write .codecontext/config.yaml in the target directory and exit",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="With --init, overwrite an existing config",
    )
    args = parser.parse_args()

    if args.init:
        project_dir = args.target_dir or os.getcwd()
        config_path = create_default_config(project_dir, force=args.force)
        print(f"Created {config_path}", file=sys.stderr)
        return

    config = get_full_config(args.target_dir)
    if args.debounce_ms is not None:
        config["debounce_ms"] = args.debounce_ms
    if args.enable_dart:
        config["enable_dart"] = True

    state = reset_server_state(config)
    logger.info(f"Initial analysis of {state.target_dir}")
    state.refresh_analysis()

    if args.watch:
        state.start_watcher(state.target_dir)

    logger.info("Starting CodeContext MCP server")
    try:
        mcp.run()
    finally:
        state.stop()


if __name__ == "__main__":
    main()
