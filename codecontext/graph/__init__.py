"""
Code Graph

In-memory graph model produced by one analysis run.
"""

from codecontext.graph.models import (
    EdgeType,
    FileNode,
    FrameworkType,
    GraphEdge,
    GraphMetadata,
    GraphNode,
    ImportRecord,
    Location,
    NodeType,
    Symbol,
    SymbolKind,
    file_node_id,
    make_symbol_id,
    symbol_node_id,
)
from codecontext.graph.store import CodeGraph, path_from_node_id

__all__ = [
    "CodeGraph",
    "EdgeType",
    "FileNode",
    "FrameworkType",
    "GraphEdge",
    "GraphMetadata",
    "GraphNode",
    "ImportRecord",
    "Location",
    "NodeType",
    "Symbol",
    "SymbolKind",
    "file_node_id",
    "make_symbol_id",
    "path_from_node_id",
    "symbol_node_id",
]
