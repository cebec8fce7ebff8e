"""
Tests for CodeGraph
"""

import pytest

from codecontext.exceptions import GraphSealedError
from codecontext.graph.models import (
    EdgeType,
    FileNode,
    FrameworkType,
    GraphEdge,
    GraphNode,
    Location,
    NodeType,
    Symbol,
    SymbolKind,
    file_node_id,
    make_symbol_id,
)
from codecontext.graph.store import CodeGraph, path_from_node_id


def make_symbol(name: str, path: str, line: int = 1, framework_type=None) -> Symbol:
    return Symbol(
        id=make_symbol_id(path, "function", name, line, 1),
        name=name,
        kind=SymbolKind.FUNCTION,
        location=Location(line, line),
        language="typescript",
        framework_type=framework_type,
    )


@pytest.fixture
def graph():
    g = CodeGraph("/project")
    a = FileNode(path="/project/src/a.ts", language="typescript")
    b = FileNode(path="/project/src/b.ts", language="typescript")
    symbol = make_symbol("useThing", a.path, framework_type=FrameworkType.HOOK)
    a.symbols.append(symbol.id)
    g.add_file(a)
    g.add_file(b)
    g.add_symbol(symbol, a.path)
    g.add_node(GraphNode(id=file_node_id(a.path), type=NodeType.FILE, label="a.ts", file_path=a.path))
    g.add_edge(GraphEdge(
        id=f"import-{a.path}-{b.path}",
        source=file_node_id(a.path),
        target=file_node_id(b.path),
        type=EdgeType.IMPORTS,
    ))
    return g


class TestSymbolIds:
    """Test stable symbol ids."""

    def test_deterministic(self):
        assert make_symbol_id("/p/a.ts", "function", "f", 3, 1) == make_symbol_id("/p/a.ts", "function", "f", 3, 1)

    def test_position_matters(self):
        assert make_symbol_id("/p/a.ts", "function", "f", 3, 1) != make_symbol_id("/p/a.ts", "function", "f", 4, 1)

    def test_sixteen_hex_chars(self):
        symbol_id = make_symbol_id("/p/a.ts", "class", "C", 1, 1)
        assert len(symbol_id) == 16
        int(symbol_id, 16)


class TestCodeGraph:
    """Test lookups and sealing."""

    def test_getters(self, graph):
        symbol = next(iter(graph.symbols.values()))
        assert graph.get_file("/project/src/a.ts").language == "typescript"
        assert graph.get_symbol(symbol.id) is symbol
        assert graph.file_of_symbol(symbol.id) == "/project/src/a.ts"
        assert graph.symbols_in_file("/project/src/a.ts") == [symbol]
        assert graph.symbols_in_file("/project/missing.ts") == []

    def test_display_type(self, graph):
        symbol = next(iter(graph.symbols.values()))
        assert symbol.display_type == "hook"
        assert make_symbol("plain", "/x.ts").display_type == "function"

    def test_resolves_file_ids_without_nodes(self, graph):
        assert graph.resolves(file_node_id("/project/src/b.ts"))
        assert not graph.resolves(file_node_id("/project/src/c.ts"))

    def test_imports_and_dependents(self, graph):
        assert [e.target for e in graph.imports_of("/project/src/a.ts")] == [file_node_id("/project/src/b.ts")]
        assert [e.source for e in graph.dependents_of("/project/src/b.ts")] == [file_node_id("/project/src/a.ts")]
        assert graph.dependents_of("/project/src/a.ts") == []

    def test_relative_path(self, graph):
        assert graph.relative_path("/project/src/a.ts") == "src/a.ts"
        assert graph.relative_path("/elsewhere/x.ts") == "/elsewhere/x.ts"

    def test_sealed_rejects_all_inserts(self, graph):
        graph.seal()
        with pytest.raises(GraphSealedError):
            graph.add_file(FileNode(path="/project/c.ts", language="typescript"))
        with pytest.raises(GraphSealedError):
            graph.add_symbol(make_symbol("x", "/project/c.ts"), "/project/c.ts")
        with pytest.raises(GraphSealedError):
            graph.add_edge(GraphEdge(id="e", source="a", target="b", type=EdgeType.IMPORTS))
        assert len(graph.files) == 2

    def test_path_from_node_id(self):
        assert path_from_node_id("file-/project/a.ts") == "/project/a.ts"
        assert path_from_node_id("symbol-abc") == "symbol-abc"
