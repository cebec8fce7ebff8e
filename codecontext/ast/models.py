"""
Data Models for the Parser Facade

Language descriptors, file classification, and parsed-file results.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from tree_sitter import Tree

# Parse quality levels
QUALITY_COMPLETE = "complete"
QUALITY_PARTIAL = "partial"
QUALITY_BASIC = "basic"


@dataclass(frozen=True)
class Language:
    """A supported language and how it is parsed."""

    name: str
    extensions: tuple[str, ...]
    parser: str  # tree-sitter grammar name, or "json", "yaml", "markdown", "regex"


@dataclass(frozen=True)
class FileClassification:
    """Result of classifying a path."""

    language: Language
    is_test: bool = False
    is_generated: bool = False


@dataclass
class ParsedFile:
    """
    A parsed source file.

    ``rel_path`` is ``path`` relative to the analyzed root (forward slashes);
    path conventions are checked against it.
    ``source`` holds the raw bytes tree-sitter offsets refer to. ``tree`` is
    set for tree-sitter languages. ``data`` holds the decoded
    document for JSON/YAML. ``errors`` lists recoverable parse problems.
    """

    path: str
    language: Language
    content: str
    source: bytes
    size: int
    rel_path: str = ""
    tree: Optional[Tree] = None
    data: Any = None
    quality: str = QUALITY_COMPLETE
    errors: list[str] = field(default_factory=list)

    @property
    def line_count(self) -> int:
        return self.content.count("\n") + 1
