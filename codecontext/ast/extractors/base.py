"""
Base Extractor Interface

Abstract base class that all language extractors implement, plus the
shared tree-sitter traversal helpers.
"""

import re
from abc import ABC, abstractmethod
from typing import Optional

from tree_sitter import Node

from codecontext.ast.models import ParsedFile
from codecontext.graph.models import (
    FrameworkType,
    ImportRecord,
    Location,
    Symbol,
    SymbolKind,
    make_symbol_id,
)

_PASCAL_CASE = re.compile(r"^[A-Z][A-Za-z0-9]*$")
_HOOK_NAME = re.compile(r"^use[A-Z0-9]")


class LanguageExtractor(ABC):
    """
    Abstract base class for language-specific extractors.

    Each extractor serves one or more language names (JavaScript shares the
    TypeScript extractor) and turns a ParsedFile into symbols and imports.
    """

    @property
    @abstractmethod
    def languages(self) -> tuple[str, ...]:
        """Language names this extractor handles."""
        pass

    @abstractmethod
    def extract_symbols(self, parsed: ParsedFile) -> list[Symbol]:
        """
        Extract declarations from a parsed file.

        Args:
            parsed: Parser output for one file

        Returns:
            Symbols in source order
        """
        pass

    @abstractmethod
    def extract_imports(self, parsed: ParsedFile) -> list[ImportRecord]:
        """
        Extract import statements from a parsed file.

        Args:
            parsed: Parser output for one file

        Returns:
            Import records in source order
        """
        pass

    # Symbol construction

    def make_symbol(
        self,
        parsed: ParsedFile,
        name: str,
        kind: SymbolKind,
        node: Optional[Node] = None,
        location: Optional[Location] = None,
        framework_type: Optional[FrameworkType] = None,
        qualified_name: str = "",
        signature: str = "",
        documentation: str = "",
    ) -> Symbol:
        """Build a Symbol with a stable id from its path, kind, name, and position."""
        if location is None:
            location = self.node_location(node)
        return Symbol(
            id=make_symbol_id(parsed.path, kind.value, name, location.start_line, location.start_col),
            name=name,
            kind=kind,
            location=location,
            language=parsed.language.name,
            framework_type=framework_type,
            fully_qualified_name=qualified_name or name,
            signature=signature,
            documentation=documentation,
        )

    @staticmethod
    def node_location(node: Node) -> Location:
        return Location(
            start_line=node.start_point[0] + 1,
            end_line=node.end_point[0] + 1,
            start_col=node.start_point[1] + 1,
            end_col=node.end_point[1] + 1,
        )

    def signature_of(self, node: Node, source: bytes, body: Optional[Node] = None) -> str:
        """Declaration text up to its body, collapsed to one line."""
        end = body.start_byte if body is not None else node.end_byte
        text = source[node.start_byte:end].decode("utf-8", errors="replace")
        if body is None:
            text = text.split("\n", 1)[0]
        return " ".join(text.split()).rstrip(" {:=")

    def leading_comment(self, node: Node, source: bytes) -> str:
        """Comment block directly above a node, with comment markers removed."""
        lines = []
        current = node.prev_sibling
        expected_row = node.start_point[0] - 1
        while current is not None and "comment" in current.type and current.end_point[0] == expected_row:
            lines.insert(0, self.get_node_text(current, source))
            expected_row = current.start_point[0] - 1
            current = current.prev_sibling
        return clean_comment("\n".join(lines))

    # Helper methods for AST traversal

    def get_node_text(self, node: Node, source: bytes) -> str:
        """Extract the text content of an AST node."""
        return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    def find_children(self, node: Node, type_name: str) -> list[Node]:
        """Find all direct children of a specific type."""
        return [child for child in node.children if child.type == type_name]

    def find_child(self, node: Node, type_name: str) -> Optional[Node]:
        """Find the first direct child of a specific type."""
        for child in node.children:
            if child.type == type_name:
                return child
        return None

    def field_text(self, node: Node, field_name: str, source: bytes) -> str:
        child = node.child_by_field_name(field_name)
        return self.get_node_text(child, source) if child is not None else ""

    def walk_tree(self, node: Node, type_name: str) -> list[Node]:
        """
        Walk the tree and find all nodes of a specific type.

        Args:
            node: Starting node
            type_name: Node type to find

        Returns:
            List of matching nodes
        """
        results = []

        def _walk(n: Node):
            if n.type == type_name:
                results.append(n)
            for child in n.children:
                _walk(child)

        _walk(node)
        return results

    def contains_type(self, node: Node, type_names: set[str]) -> bool:
        """True if any descendant has one of the given types."""
        stack = [node]
        while stack:
            current = stack.pop()
            if current.type in type_names:
                return True
            stack.extend(current.children)
        return False


def clean_comment(text: str) -> str:
    """Strip comment delimiters from ``//``, ``///``, ``#`` and ``/* */`` blocks."""
    cleaned = []
    for line in text.splitlines():
        line = line.strip()
        for prefix in ("/**", "/*", "///", "//!", "//", "#"):
            if line.startswith(prefix):
                line = line[len(prefix):]
                break
        if line.endswith("*/"):
            line = line[:-2]
        line = line.strip()
        if line.startswith("*"):
            line = line[1:].strip()
        if line:
            cleaned.append(line)
    return "\n".join(cleaned)


def is_pascal_case(name: str) -> bool:
    return bool(_PASCAL_CASE.match(name))


def is_hook_name(name: str) -> bool:
    return bool(_HOOK_NAME.match(name))


# Registry of extractors by language
_extractors: dict[str, LanguageExtractor] = {}


def register_extractor(extractor: LanguageExtractor) -> None:
    """Register an extractor for each of its languages."""
    for language in extractor.languages:
        _extractors[language] = extractor


def get_extractor(language: str) -> Optional[LanguageExtractor]:
    """
    Get the extractor for a language.

    Args:
        language: Language name (python, typescript, go, ...)

    Returns:
        LanguageExtractor or None if unsupported
    """
    return _extractors.get(language)
