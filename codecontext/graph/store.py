"""
Code Graph Store

In-memory holder for one analysis run. The builder is the only writer;
once sealed, the graph is published and treated as an immutable snapshot.
"""

import os
from datetime import datetime, timezone
from typing import Iterator, Optional

from codecontext.configs.constants import GRAPH_VERSION
from codecontext.exceptions import GraphSealedError
from codecontext.graph.models import (
    EdgeType,
    FileNode,
    GraphEdge,
    GraphMetadata,
    GraphNode,
    Symbol,
    file_node_id,
)


class CodeGraph:
    """
    Files, symbols, nodes, edges, and metadata of one analysis.

    Inserters (``add_*``) are for the builder only and raise
    GraphSealedError after ``seal()``.
    """

    def __init__(self, root_dir: str = ""):
        self.root_dir = root_dir
        self.nodes: dict[str, GraphNode] = {}
        self.edges: dict[str, GraphEdge] = {}
        self.files: dict[str, FileNode] = {}
        self.symbols: dict[str, Symbol] = {}
        self.metadata = GraphMetadata(
            generated=datetime.now(timezone.utc),
            version=GRAPH_VERSION,
        )
        self._symbol_files: dict[str, str] = {}
        self._sealed = False

    # --- Builder-only inserters ---

    def _check_writable(self) -> None:
        if self._sealed:
            raise GraphSealedError("Code graph is sealed and cannot be modified")

    def add_file(self, file_node: FileNode) -> None:
        self._check_writable()
        self.files[file_node.path] = file_node

    def add_symbol(self, symbol: Symbol, file_path: str) -> None:
        self._check_writable()
        self.symbols[symbol.id] = symbol
        self._symbol_files[symbol.id] = file_path

    def add_node(self, node: GraphNode) -> None:
        self._check_writable()
        self.nodes[node.id] = node

    def add_edge(self, edge: GraphEdge) -> None:
        self._check_writable()
        self.edges[edge.id] = edge

    def seal(self) -> None:
        """Mark the graph complete; further inserts raise."""
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    # --- Typed getters ---

    def get_file(self, path: str) -> Optional[FileNode]:
        return self.files.get(path)

    def get_symbol(self, symbol_id: str) -> Optional[Symbol]:
        return self.symbols.get(symbol_id)

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        return self.nodes.get(node_id)

    def get_edge(self, edge_id: str) -> Optional[GraphEdge]:
        return self.edges.get(edge_id)

    def file_of_symbol(self, symbol_id: str) -> Optional[str]:
        """Path of the file that declares a symbol."""
        return self._symbol_files.get(symbol_id)

    def symbols_in_file(self, path: str) -> list[Symbol]:
        file_node = self.files.get(path)
        if file_node is None:
            return []
        return [self.symbols[sid] for sid in file_node.symbols if sid in self.symbols]

    def iter_symbols(self) -> Iterator[tuple[Symbol, str]]:
        """Yield (symbol, file_path) pairs in insertion order."""
        for symbol_id, symbol in self.symbols.items():
            yield symbol, self._symbol_files.get(symbol_id, "")

    def iter_edges(self, edge_type: Optional[EdgeType] = None) -> Iterator[GraphEdge]:
        for edge in self.edges.values():
            if edge_type is None or edge.type == edge_type:
                yield edge

    def resolves(self, node_id: str) -> bool:
        """True if a node id names a node or a file in this graph."""
        if node_id in self.nodes:
            return True
        return node_id.startswith("file-") and node_id[len("file-"):] in self.files

    def relative_path(self, path: str) -> str:
        """Path relative to the analyzed root, with forward slashes."""
        if not self.root_dir:
            return path
        rel = os.path.relpath(path, self.root_dir).replace(os.sep, "/")
        return path if rel.startswith("../") or rel == ".." else rel

    def imports_of(self, path: str) -> list[GraphEdge]:
        """Import edges leaving a file."""
        node_id = file_node_id(path)
        return [e for e in self.iter_edges(EdgeType.IMPORTS) if e.source == node_id]

    def dependents_of(self, path: str) -> list[GraphEdge]:
        """Import edges arriving at a file."""
        node_id = file_node_id(path)
        return [e for e in self.iter_edges(EdgeType.IMPORTS) if e.target == node_id]


def path_from_node_id(node_id: str) -> str:
    """Strip the ``file-`` prefix from a file node id."""
    if node_id.startswith("file-"):
        return node_id[len("file-"):]
    return node_id
