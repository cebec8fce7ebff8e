"""
Data Models for the Code Graph

Files, symbols, imports, generic nodes, typed edges, and graph metadata.
"""

import hashlib
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class SymbolKind(str, Enum):
    """Structural kind of a symbol."""

    FUNCTION = "function"
    METHOD = "method"
    CLASS = "class"
    INTERFACE = "interface"
    STRUCT = "struct"
    TRAIT = "trait"
    ENUM = "enum"
    TYPE = "type"
    VARIABLE = "variable"
    CONSTANT = "constant"
    PROPERTY = "property"
    MODULE = "module"
    MIXIN = "mixin"
    EXTENSION = "extension"
    TYPEDEF = "typedef"
    HEADING = "heading"


class FrameworkType(str, Enum):
    """Framework sub-type, orthogonal to SymbolKind."""

    COMPONENT = "component"
    HOOK = "hook"
    SERVICE = "service"
    STORE = "store"
    ROUTE = "route"
    MIDDLEWARE = "middleware"
    ACTION = "action"
    COMPUTED = "computed"
    WATCHER = "watcher"
    LIFECYCLE = "lifecycle"
    DIRECTIVE = "directive"
    WIDGET = "widget"
    MIXIN = "mixin"
    EXTENSION = "extension"
    ENUM = "enum"
    TYPEDEF = "typedef"
    BUILD_METHOD = "build_method"
    STATE_CLASS = "state_class"


class NodeType(str, Enum):
    """Type tag of a graph vertex."""

    FILE = "file"
    SYMBOL = "symbol"


class EdgeType(str, Enum):
    """Type tag of a graph edge."""

    IMPORTS = "imports"


@dataclass(frozen=True)
class Location:
    """Source span; lines and columns are 1-based."""

    start_line: int
    end_line: int
    start_col: int = 1
    end_col: int = 1


@dataclass
class Symbol:
    """A named declaration extracted from a source file."""

    id: str
    name: str
    kind: SymbolKind
    location: Location
    language: str
    framework_type: Optional[FrameworkType] = None
    fully_qualified_name: str = ""
    signature: str = ""
    documentation: str = ""

    @property
    def display_type(self) -> str:
        """Framework sub-type when present, otherwise the kind."""
        if self.framework_type is not None:
            return self.framework_type.value
        return self.kind.value


@dataclass
class ImportRecord:
    """An import statement as written in the source."""

    path: str
    specifiers: list[str] = field(default_factory=list)
    is_default: bool = False
    line: int = 0


@dataclass
class FileNode:
    """A parsed source file."""

    path: str
    language: str
    size: int = 0
    lines: int = 0
    symbol_count: int = 0
    import_count: int = 0
    is_test: bool = False
    is_generated: bool = False
    last_modified: Optional[datetime] = None
    symbols: list[str] = field(default_factory=list)
    imports: list[ImportRecord] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class GraphNode:
    """Polymorphic graph vertex."""

    id: str
    type: NodeType
    label: str
    file_path: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class GraphEdge:
    """Directed, typed edge between two node ids."""

    id: str
    source: str
    target: str
    type: EdgeType
    weight: float = 1.0
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class GraphMetadata:
    """Summary of one analysis run."""

    generated: datetime
    version: str
    total_files: int = 0
    total_symbols: int = 0
    languages: dict[str, int] = field(default_factory=dict)
    analysis_time: float = 0.0  # seconds
    configuration: dict[str, Any] = field(default_factory=dict)


def make_symbol_id(file_path: str, kind: str, name: str, line: int, col: int) -> str:
    """Stable symbol id derived from path, kind, name, and start position."""
    key = f"{file_path}|{kind}|{name}|{line}|{col}"
    return hashlib.sha1(key.encode("utf-8")).hexdigest()[:16]


def file_node_id(path: str) -> str:
    return f"file-{path}"


def symbol_node_id(symbol_id: str) -> str:
    return f"symbol-{symbol_id}"
