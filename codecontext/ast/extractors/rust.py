"""
Rust Extractor

Extracts symbols and ``use`` imports from Rust source files using tree-sitter.
"""

import re

from tree_sitter import Node

from codecontext.ast.extractors.base import LanguageExtractor, clean_comment, register_extractor
from codecontext.ast.models import ParsedFile
from codecontext.graph.models import FrameworkType, ImportRecord, Symbol, SymbolKind

ITEM_KINDS = {
    "function_item": SymbolKind.FUNCTION,
    "struct_item": SymbolKind.STRUCT,
    "enum_item": SymbolKind.ENUM,
    "union_item": SymbolKind.STRUCT,
    "trait_item": SymbolKind.TRAIT,
    "type_item": SymbolKind.TYPE,
    "const_item": SymbolKind.CONSTANT,
    "static_item": SymbolKind.VARIABLE,
    "mod_item": SymbolKind.MODULE,
}

# actix-web / rocket route attributes: #[get("/")], #[post(...)], #[route(...)]
ROUTE_ATTRIBUTE = re.compile(r"^#\[\s*(get|post|put|patch|delete|head|options|route)\s*\(")


class RustExtractor(LanguageExtractor):
    """Extracts symbols and imports from Rust source files."""

    @property
    def languages(self) -> tuple[str, ...]:
        return ("rust",)

    def extract_imports(self, parsed: ParsedFile) -> list[ImportRecord]:
        if parsed.tree is None:
            return []
        source = parsed.source
        records = []
        for node in self.walk_tree(parsed.tree.root_node, "use_declaration"):
            argument = node.child_by_field_name("argument")
            if argument is None:
                continue
            text = " ".join(self.get_node_text(argument, source).split())
            path, specifiers = text, []
            if "::{" in text and text.endswith("}"):
                path, group = text.split("::{", 1)
                specifiers = [s.strip() for s in group[:-1].split(",") if s.strip()]
            elif "::" in text:
                specifiers = [text.rsplit("::", 1)[-1]]
            records.append(ImportRecord(path=path, specifiers=specifiers, line=node.start_point[0] + 1))
        return records

    def extract_symbols(self, parsed: ParsedFile) -> list[Symbol]:
        if parsed.tree is None:
            return []
        symbols: list[Symbol] = []
        for node in parsed.tree.root_node.children:
            if node.type in ITEM_KINDS:
                self._add_item(node, parsed, symbols, ITEM_KINDS[node.type])
            elif node.type == "impl_item":
                self._collect_impl(node, parsed, symbols)
        return symbols

    def _add_item(self, node: Node, parsed: ParsedFile, symbols: list[Symbol],
                  kind: SymbolKind, owner: str = "") -> None:
        source = parsed.source
        name = self.field_text(node, "name", source)
        if not name:
            return
        attributes, documentation = self._preceding(node, source)
        framework_type = None
        if any(ROUTE_ATTRIBUTE.match(a) for a in attributes):
            framework_type = FrameworkType.ROUTE
        symbols.append(self.make_symbol(
            parsed, name, kind, node,
            framework_type=framework_type,
            qualified_name=f"{owner}::{name}" if owner else name,
            signature=self.signature_of(node, source, node.child_by_field_name("body")),
            documentation=documentation,
        ))

    def _collect_impl(self, node: Node, parsed: ParsedFile, symbols: list[Symbol]) -> None:
        owner = self.field_text(node, "type", parsed.source)
        body = node.child_by_field_name("body")
        if body is None:
            return
        for member in body.children:
            if member.type == "function_item":
                self._add_item(member, parsed, symbols, SymbolKind.METHOD, owner=owner)

    def _preceding(self, node: Node, source: bytes) -> tuple[list[str], str]:
        """Collect attribute items and doc comments directly above an item."""
        attributes = []
        comments = []
        current = node.prev_sibling
        while current is not None and (current.type == "attribute_item" or "comment" in current.type):
            text = self.get_node_text(current, source)
            if current.type == "attribute_item":
                attributes.insert(0, text)
            elif text.startswith("///"):
                comments.insert(0, text)
            else:
                break
            current = current.prev_sibling
        return attributes, clean_comment("\n".join(comments))


register_extractor(RustExtractor())
