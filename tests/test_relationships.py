"""
Tests for import resolution and relationship metrics.
"""

import pytest

from codecontext.analyzer.path_matcher import PathMatcher
from codecontext.analyzer.relationships import (
    RelationshipAnalyzer,
    build_basic_relationships,
    is_relative_import,
    resolve_python_import,
    resolve_relative_import,
)
from codecontext.exceptions import AnalysisError, ImportEscapesProjectError
from codecontext.graph.models import EdgeType, FileNode, ImportRecord, file_node_id
from codecontext.graph.store import CodeGraph

ROOT = "/project"


def make_graph(files: dict[str, list[ImportRecord]], language: str = "typescript") -> CodeGraph:
    """Graph of ``{relative path: imports}`` below ROOT, without symbols."""
    graph = CodeGraph(ROOT)
    for rel, imports in files.items():
        lang = "python" if rel.endswith(".py") else language
        graph.add_file(FileNode(path=f"{ROOT}/{rel}", language=lang, imports=imports))
    return graph


def edge_pairs(graph: CodeGraph) -> set[tuple[str, str]]:
    return {
        (graph.relative_path(e.source[len("file-"):]), graph.relative_path(e.target[len("file-"):]))
        for e in graph.iter_edges(EdgeType.IMPORTS)
    }


# =============================================================================
# Resolution helpers
# =============================================================================


class TestIsRelativeImport:
    """Test relative import detection."""

    @pytest.mark.parametrize("path", ["./b", "../lib/x", ".", ".."])
    def test_relative(self, path):
        assert is_relative_import(path)

    @pytest.mark.parametrize("path", ["react", "@scope/pkg", "fmt", "/abs/path"])
    def test_not_relative(self, path):
        assert not is_relative_import(path)


class TestResolveRelativeImport:
    """Test JS/TS-style resolution order."""

    def test_extension_candidates(self):
        graph = make_graph({"src/a.ts": [], "src/b.tsx": []})
        target = resolve_relative_import(f"{ROOT}/src/a.ts", "./b", graph.files, PathMatcher())
        assert target == f"{ROOT}/src/b.tsx"

    def test_exact_path_wins(self):
        graph = make_graph({"src/a.ts": [], "src/b.js": [], "src/b.js.ts": []})
        target = resolve_relative_import(f"{ROOT}/src/a.ts", "./b.js", graph.files, PathMatcher())
        assert target == f"{ROOT}/src/b.js"

    def test_directory_index(self):
        graph = make_graph({"src/app.ts": [], "src/components/index.ts": []})
        target = resolve_relative_import(f"{ROOT}/src/app.ts", "./components", graph.files, PathMatcher())
        assert target == f"{ROOT}/src/components/index.ts"

    def test_parent_directory(self):
        graph = make_graph({"src/ui/view.ts": [], "src/util.ts": []})
        target = resolve_relative_import(f"{ROOT}/src/ui/view.ts", "../util", graph.files, PathMatcher())
        assert target == f"{ROOT}/src/util.ts"

    def test_unknown_target(self):
        graph = make_graph({"src/a.ts": []})
        assert resolve_relative_import(f"{ROOT}/src/a.ts", "./missing", graph.files, PathMatcher()) is None

    def test_escape_rejected(self):
        graph = make_graph({"a/b/c/d.ts": []})
        with pytest.raises(ImportEscapesProjectError):
            resolve_relative_import(f"{ROOT}/a/b/c/d.ts", "../../../x", graph.files, PathMatcher())


class TestResolvePythonImport:
    """Test Python relative import resolution."""

    def test_sibling_module(self):
        graph = make_graph({"pkg/__init__.py": [], "pkg/models.py": [], "pkg/views.py": []})
        record = ImportRecord(path=".models", specifiers=["User"])
        targets = resolve_python_import(f"{ROOT}/pkg/views.py", record, graph.files, PathMatcher())
        assert targets == [f"{ROOT}/pkg/models.py"]

    def test_parent_package(self):
        graph = make_graph({"pkg/__init__.py": [], "pkg/core/__init__.py": [], "pkg/core/run.py": []})
        record = ImportRecord(path="..core", specifiers=["run"])
        targets = resolve_python_import(f"{ROOT}/pkg/sub/x.py", record, graph.files, PathMatcher())
        assert targets == [f"{ROOT}/pkg/core/__init__.py"]

    def test_from_dot_import_names(self):
        graph = make_graph({"pkg/__init__.py": [], "pkg/utils.py": [], "pkg/helpers/__init__.py": [], "pkg/a.py": []})
        record = ImportRecord(path=".", specifiers=["utils", "helpers", "missing"])
        targets = resolve_python_import(f"{ROOT}/pkg/a.py", record, graph.files, PathMatcher())
        assert targets == [f"{ROOT}/pkg/utils.py", f"{ROOT}/pkg/helpers/__init__.py"]

    def test_from_dot_falls_back_to_package_init(self):
        graph = make_graph({"pkg/__init__.py": [], "pkg/a.py": []})
        record = ImportRecord(path=".", specifiers=["CONSTANT"])
        targets = resolve_python_import(f"{ROOT}/pkg/a.py", record, graph.files, PathMatcher())
        assert targets == [f"{ROOT}/pkg/__init__.py"]


# =============================================================================
# RelationshipAnalyzer
# =============================================================================


class TestRelationshipAnalyzer:
    """Test full relationship analysis."""

    def test_edges_and_counts(self):
        graph = make_graph({
            "src/a.ts": [ImportRecord("./b", ["X"]), ImportRecord("react", ["useState"]), ImportRecord("./gone")],
            "src/b.ts": [ImportRecord("./c")],
            "src/c.ts": [],
        })
        metrics = RelationshipAnalyzer(graph, PathMatcher()).analyze_all_relationships()
        assert edge_pairs(graph) == {("src/a.ts", "src/b.ts"), ("src/b.ts", "src/c.ts")}
        assert metrics["resolved_imports"] == 2
        assert metrics["unresolved_imports"] == 1
        assert metrics["rejected_imports"] == 0
        assert metrics["import_edges"] == 2

    def test_rejected_import_creates_no_edge(self):
        graph = make_graph({"a.ts": [ImportRecord("../../../etc/passwd")]})
        metrics = RelationshipAnalyzer(graph, PathMatcher()).analyze_all_relationships()
        assert metrics["rejected_imports"] == 1
        assert list(graph.iter_edges()) == []

    def test_self_import_excluded(self):
        graph = make_graph({"src/a.ts": [ImportRecord("./a")]})
        RelationshipAnalyzer(graph, PathMatcher()).analyze_all_relationships()
        assert list(graph.iter_edges()) == []

    def test_python_imports(self):
        graph = make_graph({
            "pkg/__init__.py": [],
            "pkg/models.py": [ImportRecord("os"), ImportRecord("dataclasses", ["dataclass"])],
            "pkg/views.py": [ImportRecord(".models", ["User"]), ImportRecord(".", ["utils"])],
            "pkg/utils.py": [],
        })
        RelationshipAnalyzer(graph, PathMatcher()).analyze_all_relationships()
        assert edge_pairs(graph) == {("pkg/views.py", "pkg/models.py"), ("pkg/views.py", "pkg/utils.py")}

    def test_edge_shape(self):
        graph = make_graph({"a.ts": [ImportRecord("./b", ["X"], is_default=False, line=1)], "b.ts": []})
        RelationshipAnalyzer(graph, PathMatcher()).analyze_all_relationships()
        edge = graph.get_edge(f"import-{ROOT}/a.ts-{ROOT}/b.ts")
        assert edge is not None
        assert edge.source == file_node_id(f"{ROOT}/a.ts")
        assert edge.target == file_node_id(f"{ROOT}/b.ts")
        assert edge.weight == 1.0
        assert edge.metadata == {"import_path": "./b", "specifiers": ["X"], "is_default": False}

    def test_fan_in_fan_out_metrics(self):
        graph = make_graph({
            "a.ts": [ImportRecord("./shared")],
            "b.ts": [ImportRecord("./shared")],
            "c.ts": [ImportRecord("./shared"), ImportRecord("./b")],
            "shared.ts": [],
        })
        metrics = RelationshipAnalyzer(graph, PathMatcher()).analyze_all_relationships()
        assert metrics["fan_in"]["max"] == 3
        assert metrics["fan_out"]["max"] == 2
        assert metrics["fan_in"]["distribution"] == {"0": 2, "1": 1, "3": 1}
        assert metrics["files_with_imports"] == 3
        assert metrics["most_imported"][0] == {"file": f"{ROOT}/shared.ts", "count": 3}

    def test_sealed_graph_raises(self):
        graph = make_graph({"a.ts": []})
        graph.seal()
        with pytest.raises(AnalysisError):
            RelationshipAnalyzer(graph, PathMatcher()).analyze_all_relationships()


class TestBasicRelationships:
    """Test the fallback resolver."""

    def test_relative_imports_only(self):
        graph = make_graph({
            "a.ts": [ImportRecord("./b"), ImportRecord("lodash"), ImportRecord("../../../../x")],
            "b.ts": [],
        })
        created = build_basic_relationships(graph, PathMatcher())
        assert created == 1
        assert edge_pairs(graph) == {("a.ts", "b.ts")}
