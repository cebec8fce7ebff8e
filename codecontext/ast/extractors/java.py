"""
Java Extractor

Extracts symbols and imports from Java source files using tree-sitter.
Spring stereotype and mapping annotations set the framework sub-type.
"""

from typing import Optional

from tree_sitter import Node

from codecontext.ast.extractors.base import LanguageExtractor, register_extractor
from codecontext.ast.models import ParsedFile
from codecontext.graph.models import FrameworkType, ImportRecord, Symbol, SymbolKind

TYPE_DECLARATIONS = {
    "class_declaration": SymbolKind.CLASS,
    "interface_declaration": SymbolKind.INTERFACE,
    "enum_declaration": SymbolKind.ENUM,
    "record_declaration": SymbolKind.CLASS,
    "annotation_type_declaration": SymbolKind.INTERFACE,
}

CLASS_ANNOTATIONS = {
    "RestController": FrameworkType.COMPONENT,
    "Controller": FrameworkType.COMPONENT,
    "Component": FrameworkType.COMPONENT,
    "Service": FrameworkType.SERVICE,
    "Repository": FrameworkType.SERVICE,
}

METHOD_ANNOTATIONS = {
    "GetMapping": FrameworkType.ROUTE,
    "PostMapping": FrameworkType.ROUTE,
    "PutMapping": FrameworkType.ROUTE,
    "PatchMapping": FrameworkType.ROUTE,
    "DeleteMapping": FrameworkType.ROUTE,
    "RequestMapping": FrameworkType.ROUTE,
    "PostConstruct": FrameworkType.LIFECYCLE,
    "PreDestroy": FrameworkType.LIFECYCLE,
}


class JavaExtractor(LanguageExtractor):
    """Extracts symbols and imports from Java source files."""

    @property
    def languages(self) -> tuple[str, ...]:
        return ("java",)

    def extract_imports(self, parsed: ParsedFile) -> list[ImportRecord]:
        if parsed.tree is None:
            return []
        source = parsed.source
        records = []
        for node in self.find_children(parsed.tree.root_node, "import_declaration"):
            name_node = self.find_child(node, "scoped_identifier") or self.find_child(node, "identifier")
            if name_node is None:
                continue
            path = self.get_node_text(name_node, source)
            if self.find_child(node, "asterisk") is not None:
                path = f"{path}.*"
            records.append(ImportRecord(
                path=path,
                specifiers=[path.rsplit(".", 1)[-1]],
                line=node.start_point[0] + 1,
            ))
        return records

    def extract_symbols(self, parsed: ParsedFile) -> list[Symbol]:
        if parsed.tree is None:
            return []
        symbols: list[Symbol] = []
        for node in parsed.tree.root_node.children:
            if node.type in TYPE_DECLARATIONS:
                self._collect_type(node, parsed, symbols, outer="")
        return symbols

    def _collect_type(self, node: Node, parsed: ParsedFile, symbols: list[Symbol], outer: str) -> None:
        source = parsed.source
        name = self.field_text(node, "name", source)
        if not name:
            return
        qualified = f"{outer}.{name}" if outer else name
        body = node.child_by_field_name("body")

        symbols.append(self.make_symbol(
            parsed, name, TYPE_DECLARATIONS[node.type], node,
            framework_type=self._annotation_type(node, source, CLASS_ANNOTATIONS),
            qualified_name=qualified,
            signature=self.signature_of(node, source, body),
            documentation=self.leading_comment(node, source),
        ))
        if body is None:
            return

        for member in body.children:
            if member.type in TYPE_DECLARATIONS:
                self._collect_type(member, parsed, symbols, outer=qualified)
            elif member.type in ("method_declaration", "constructor_declaration"):
                method_name = self.field_text(member, "name", source)
                if not method_name:
                    continue
                symbols.append(self.make_symbol(
                    parsed, method_name, SymbolKind.METHOD, member,
                    framework_type=self._annotation_type(member, source, METHOD_ANNOTATIONS),
                    qualified_name=f"{qualified}.{method_name}",
                    signature=self.signature_of(member, source, member.child_by_field_name("body")),
                    documentation=self.leading_comment(member, source),
                ))
            elif member.type == "field_declaration":
                modifiers = self.find_child(member, "modifiers")
                modifier_text = self.get_node_text(modifiers, source) if modifiers is not None else ""
                for declarator in self.find_children(member, "variable_declarator"):
                    field_name = self.field_text(declarator, "name", source)
                    if not field_name:
                        continue
                    is_constant = "static" in modifier_text and "final" in modifier_text
                    symbols.append(self.make_symbol(
                        parsed, field_name,
                        SymbolKind.CONSTANT if is_constant else SymbolKind.VARIABLE,
                        declarator,
                        qualified_name=f"{qualified}.{field_name}",
                        signature=self.signature_of(member, source),
                        documentation=self.leading_comment(member, source),
                    ))

    def _annotation_type(
        self,
        node: Node,
        source: bytes,
        table: dict[str, FrameworkType],
    ) -> Optional[FrameworkType]:
        modifiers = self.find_child(node, "modifiers")
        if modifiers is None:
            return None
        for annotation in modifiers.children:
            if annotation.type not in ("marker_annotation", "annotation"):
                continue
            name = self.field_text(annotation, "name", source).split(".")[-1]
            if name in table:
                return table[name]
        return None


register_extractor(JavaExtractor())
