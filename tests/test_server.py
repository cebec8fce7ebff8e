"""
Tests for the MCP server surface
"""

import asyncio
import sys

import pytest

from codecontext import server
from codecontext.exceptions import ConfigurationError, NotFoundError

from conftest import write_tree

TOOL_NAMES = {
    "get_codebase_overview",
    "get_file_analysis",
    "get_symbol_info",
    "search_symbols",
    "get_dependencies",
    "watch_changes",
    "get_semantic_neighborhoods",
    "get_framework_analysis",
}


class TestToolRegistration:
    """Test the registered tool set."""

    def test_all_tools_registered(self):
        tools = asyncio.run(server.mcp.list_tools())
        assert {tool.name for tool in tools} == TOOL_NAMES

    def test_tools_have_descriptions(self):
        tools = asyncio.run(server.mcp.list_tools())
        for tool in tools:
            assert tool.description

    def test_file_path_is_required_parameter(self):
        tools = {tool.name: tool for tool in asyncio.run(server.mcp.list_tools())}
        schema = tools["get_file_analysis"].inputSchema
        assert "file_path" in schema["required"]
        assert "target_dir" not in schema.get("required", [])


class TestToolWrappers:
    """Test calling the async wrappers directly."""

    def test_wrapper_runs_tool(self, temp_dir, server_state):
        write_tree(temp_dir, {"app.py": "def run():\n    pass\n"})
        result = asyncio.run(server.get_file_analysis("app.py"))
        assert result.startswith("# File Analysis: app.py")
        assert "- **run** (function) - Line 1" in result

    def test_wrapper_propagates_tool_errors(self, temp_dir, server_state):
        with pytest.raises(NotFoundError):
            asyncio.run(server.get_file_analysis("missing.py"))


class TestMain:
    """Test the command-line entry point."""

    def test_init_writes_config(self, temp_dir, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["codecontext-mcp", "--init", "--target-dir", str(temp_dir)])
        server.main()
        config = temp_dir / ".codecontext" / "config.yaml"
        assert config.exists()
        assert 'version: "2.0"' in config.read_text()

    def test_init_refuses_overwrite(self, temp_dir, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["codecontext-mcp", "--init", "--target-dir", str(temp_dir)])
        server.main()
        with pytest.raises(ConfigurationError):
            server.main()
        monkeypatch.setattr(sys, "argv", ["codecontext-mcp", "--init", "--force", "--target-dir", str(temp_dir)])
        server.main()
