"""
Go Extractor

Extracts symbols and imports from Go source files using tree-sitter.
"""

from typing import Optional

from tree_sitter import Node

from codecontext.ast.extractors.base import LanguageExtractor, register_extractor
from codecontext.ast.models import ParsedFile
from codecontext.graph.models import FrameworkType, ImportRecord, Symbol, SymbolKind

# Parameter types that mark an HTTP handler
HANDLER_PARAM_MARKERS = ("http.ResponseWriter", "*gin.Context", "echo.Context", "*fiber.Ctx")


class GoExtractor(LanguageExtractor):
    """Extracts symbols and imports from Go source files."""

    @property
    def languages(self) -> tuple[str, ...]:
        return ("go",)

    def extract_imports(self, parsed: ParsedFile) -> list[ImportRecord]:
        if parsed.tree is None:
            return []
        source = parsed.source
        records = []
        for declaration in self.walk_tree(parsed.tree.root_node, "import_declaration"):
            for spec in self.walk_tree(declaration, "import_spec"):
                path_node = spec.child_by_field_name("path")
                if path_node is None:
                    continue
                alias = self.field_text(spec, "name", source)
                records.append(ImportRecord(
                    path=self.get_node_text(path_node, source).strip('"`'),
                    specifiers=[alias] if alias else [],
                    line=spec.start_point[0] + 1,
                ))
        return records

    def extract_symbols(self, parsed: ParsedFile) -> list[Symbol]:
        if parsed.tree is None:
            return []
        source = parsed.source
        symbols: list[Symbol] = []

        for node in parsed.tree.root_node.children:
            documentation = self.leading_comment(node, source)

            if node.type == "function_declaration":
                name = self.field_text(node, "name", source)
                if name:
                    signature = self.signature_of(node, source, node.child_by_field_name("body"))
                    symbols.append(self.make_symbol(
                        parsed, name, SymbolKind.FUNCTION, node,
                        framework_type=self._function_type(name, signature),
                        signature=signature,
                        documentation=documentation,
                    ))

            elif node.type == "method_declaration":
                name = self.field_text(node, "name", source)
                if name:
                    receiver = self._receiver_type(node, source)
                    signature = self.signature_of(node, source, node.child_by_field_name("body"))
                    symbols.append(self.make_symbol(
                        parsed, name, SymbolKind.METHOD, node,
                        framework_type=self._function_type(name, signature),
                        qualified_name=f"{receiver}.{name}" if receiver else name,
                        signature=signature,
                        documentation=documentation,
                    ))

            elif node.type == "type_declaration":
                for spec in node.named_children:
                    if spec.type not in ("type_spec", "type_alias"):
                        continue
                    name = self.field_text(spec, "name", source)
                    if not name:
                        continue
                    symbols.append(self.make_symbol(
                        parsed, name, self._type_kind(spec), spec,
                        signature=f"type {self.signature_of(spec, source)}",
                        documentation=documentation,
                    ))

            elif node.type in ("const_declaration", "var_declaration"):
                kind = SymbolKind.CONSTANT if node.type == "const_declaration" else SymbolKind.VARIABLE
                spec_type = "const_spec" if kind == SymbolKind.CONSTANT else "var_spec"
                for spec in self.walk_tree(node, spec_type):
                    for name_node in spec.children_by_field_name("name"):
                        symbols.append(self.make_symbol(
                            parsed, self.get_node_text(name_node, source), kind, name_node,
                            signature=self.signature_of(spec, source),
                            documentation=documentation,
                        ))

        return symbols

    def _receiver_type(self, node: Node, source: bytes) -> str:
        receiver = node.child_by_field_name("receiver")
        if receiver is None:
            return ""
        type_nodes = self.walk_tree(receiver, "type_identifier")
        return self.get_node_text(type_nodes[0], source) if type_nodes else ""

    def _type_kind(self, spec: Node) -> SymbolKind:
        type_node = spec.child_by_field_name("type")
        if type_node is not None:
            if type_node.type == "struct_type":
                return SymbolKind.STRUCT
            if type_node.type == "interface_type":
                return SymbolKind.INTERFACE
        return SymbolKind.TYPE

    def _function_type(self, name: str, signature: str) -> Optional[FrameworkType]:
        if name.endswith("Middleware"):
            return FrameworkType.MIDDLEWARE
        if any(marker in signature for marker in HANDLER_PARAM_MARKERS):
            return FrameworkType.ROUTE
        return None


register_extractor(GoExtractor())
