"""
Relationship Analysis

Turns import records into ``imports`` edges between files of the graph and
records fan-in/fan-out metrics. The basic resolver is the fallback when the
full analysis fails.
"""

import logging
import os
from collections import Counter
from typing import Iterable, Optional

from codecontext.analyzer.path_matcher import PathMatcher
from codecontext.configs.constants import RESOLVABLE_EXTENSIONS
from codecontext.configs.logging import get_logger
from codecontext.exceptions import AnalysisError, ImportEscapesProjectError
from codecontext.graph.models import EdgeType, FileNode, GraphEdge, ImportRecord, file_node_id
from codecontext.graph.store import CodeGraph

logger = get_logger("analyzer.relationships")

MOST_IMPORTED_LIMIT = 10


def is_relative_import(import_path: str) -> bool:
    return import_path.startswith(("./", "../")) or import_path in (".", "..")


def _first_existing(candidates: Iterable[str], known_files: dict[str, FileNode]) -> Optional[str]:
    for candidate in candidates:
        if candidate in known_files:
            return candidate
    return None


def resolve_relative_import(
    importer: str,
    import_path: str,
    known_files: dict[str, FileNode],
    matcher: PathMatcher,
) -> Optional[str]:
    """
    Resolve a ``./`` or ``../`` import against the importer's directory.

    Tries the exact path, then each candidate extension, then
    ``<dir>/index.<ext>``. First hit wins.

    Raises:
        ImportEscapesProjectError: If the import fails traversal validation
    """
    resolved = matcher.normalize(matcher.validate_import(import_path, os.path.dirname(importer)))
    candidates = [resolved]
    candidates.extend(resolved + ext for ext in RESOLVABLE_EXTENSIONS)
    candidates.extend(os.path.join(resolved, "index" + ext) for ext in RESOLVABLE_EXTENSIONS)
    return _first_existing(candidates, known_files)


def resolve_python_import(
    importer: str,
    record: ImportRecord,
    known_files: dict[str, FileNode],
    matcher: PathMatcher,
) -> list[str]:
    """
    Resolve a Python relative import (``.mod``, ``..pkg.mod``, ``from . import x``).

    Raises:
        ImportEscapesProjectError: If the import fails traversal validation
    """
    dots = len(record.path) - len(record.path.lstrip("."))
    module = record.path[dots:]
    relative = "./" if dots == 1 else "../" * (dots - 1)
    if module:
        relative += module.replace(".", "/")
    resolved = matcher.normalize(matcher.validate_import(relative, os.path.dirname(importer)))

    if module:
        target = _first_existing([resolved + ".py", os.path.join(resolved, "__init__.py")], known_files)
        return [target] if target else []

    # from . import a, b: each name may be a sibling module
    targets = []
    for name in record.specifiers:
        target = _first_existing(
            [os.path.join(resolved, name + ".py"), os.path.join(resolved, name, "__init__.py")],
            known_files,
        )
        if target:
            targets.append(target)
    if not targets:
        package_init = os.path.join(resolved, "__init__.py")
        if package_init in known_files and package_init != importer:
            targets.append(package_init)
    return targets


def make_import_edge(source_path: str, target_path: str, record: ImportRecord) -> GraphEdge:
    return GraphEdge(
        id=f"import-{source_path}-{target_path}",
        source=file_node_id(source_path),
        target=file_node_id(target_path),
        type=EdgeType.IMPORTS,
        weight=1.0,
        metadata={
            "import_path": record.path,
            "specifiers": list(record.specifiers),
            "is_default": record.is_default,
        },
    )


def build_basic_relationships(
    graph: CodeGraph,
    matcher: PathMatcher,
    log: Optional[logging.Logger] = None,
) -> int:
    """
    Create edges for relative JS/TS-style imports only.

    Returns:
        Number of edges created
    """
    log = log or logger
    created = 0
    for path, file_node in graph.files.items():
        for record in file_node.imports:
            if not is_relative_import(record.path):
                continue
            try:
                target = resolve_relative_import(path, record.path, graph.files, matcher)
            except ImportEscapesProjectError as e:
                log.warning(f"Skipping import in {path}: {e}")
                continue
            if target is not None and target != path:
                graph.add_edge(make_import_edge(path, target, record))
                created += 1
    return created


class RelationshipAnalyzer:
    """
    Resolves imports across all files and summarizes the dependency graph.

    Handles JS/TS relative imports and Python relative imports; package
    imports are left unresolved.
    """

    def __init__(self, graph: CodeGraph, matcher: PathMatcher, log: Optional[logging.Logger] = None):
        self.graph = graph
        self.matcher = matcher
        self.logger = log or logger

    def analyze_all_relationships(self) -> dict:
        """
        Create import edges and compute relationship metrics.

        Returns:
            Metrics dictionary stored under ``relationship_metrics``

        Raises:
            AnalysisError: If the graph cannot accept edges
        """
        if self.graph.sealed:
            raise AnalysisError("Cannot add relationships to a sealed graph")

        resolved = unresolved = rejected = 0
        for path, file_node in self.graph.files.items():
            for record in file_node.imports:
                try:
                    targets = self._resolve(path, file_node, record)
                except ImportEscapesProjectError as e:
                    self.logger.warning(f"Skipping import in {path}: {e}")
                    rejected += 1
                    continue
                if targets is None:
                    continue
                targets = [t for t in targets if t != path]
                if not targets:
                    unresolved += 1
                    continue
                resolved += 1
                for target in targets:
                    self.graph.add_edge(make_import_edge(path, target, record))

        metrics = self._metrics()
        metrics.update({
            "resolved_imports": resolved,
            "unresolved_imports": unresolved,
            "rejected_imports": rejected,
        })
        return metrics

    def _resolve(self, path: str, file_node: FileNode, record: ImportRecord) -> Optional[list[str]]:
        """Resolved targets, or None when the import is a package import."""
        if file_node.language == "python":
            if not record.path.startswith("."):
                return None
            return resolve_python_import(path, record, self.graph.files, self.matcher)
        if not is_relative_import(record.path):
            return None
        target = resolve_relative_import(path, record.path, self.graph.files, self.matcher)
        return [target] if target else []

    def _metrics(self) -> dict:
        fan_in: Counter = Counter()
        fan_out: Counter = Counter()
        import_edges = 0
        for edge in self.graph.iter_edges(EdgeType.IMPORTS):
            import_edges += 1
            fan_out[edge.source] += 1
            fan_in[edge.target] += 1

        total_files = len(self.graph.files)
        files_with_imports = sum(1 for f in self.graph.files.values() if f.imports)

        return {
            "total_edges": len(self.graph.edges),
            "import_edges": import_edges,
            "files_with_imports": files_with_imports,
            "fan_in": _distribution(fan_in, total_files),
            "fan_out": _distribution(fan_out, total_files),
            "most_imported": [
                {"file": node_id[len("file-"):], "count": count}
                for node_id, count in sorted(fan_in.items(), key=lambda kv: (-kv[1], kv[0]))[:MOST_IMPORTED_LIMIT]
            ],
        }


def _distribution(counts: Counter, total_files: int) -> dict:
    """Max, average, and histogram (degree -> file count) over all files."""
    histogram: Counter = Counter(counts.values())
    zero_degree = total_files - len(counts)
    if zero_degree > 0:
        histogram[0] += zero_degree
    total = sum(counts.values())
    return {
        "max": max(counts.values(), default=0),
        "average": round(total / total_files, 3) if total_files else 0.0,
        "distribution": {str(k): v for k, v in sorted(histogram.items())},
    }
