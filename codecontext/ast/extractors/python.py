"""
Python Extractor

Extracts symbols and imports from Python source files using tree-sitter.
"""

import inspect
import re
from typing import Optional

from tree_sitter import Node

from codecontext.ast.extractors.base import LanguageExtractor, register_extractor
from codecontext.ast.models import ParsedFile
from codecontext.graph.models import FrameworkType, ImportRecord, Symbol, SymbolKind

# Flask/FastAPI style route decorators: @app.get(...), @router.post(...), @bp.route(...)
ROUTE_DECORATOR = re.compile(
    r"^@\s*[\w.]+\.(route|get|post|put|patch|delete|head|options|websocket|api_route)\s*\("
)
MIDDLEWARE_DECORATOR = re.compile(r"^@\s*[\w.]+\.middleware\b")


class PythonExtractor(LanguageExtractor):
    """Extracts symbols and imports from Python source files."""

    @property
    def languages(self) -> tuple[str, ...]:
        return ("python",)

    def extract_imports(self, parsed: ParsedFile) -> list[ImportRecord]:
        """Extract import and from...import statements."""
        if parsed.tree is None:
            return []
        source = parsed.source
        root = parsed.tree.root_node
        imports = []

        # Handle: import x, import x as y, import x.y.z
        for node in self.walk_tree(root, "import_statement"):
            line = node.start_point[0] + 1
            for child in node.children:
                if child.type == "dotted_name":
                    imports.append(ImportRecord(path=self.get_node_text(child, source), line=line))
                elif child.type == "aliased_import":
                    name_node = self.find_child(child, "dotted_name")
                    if name_node is not None:
                        imports.append(ImportRecord(path=self.get_node_text(name_node, source), line=line))

        # Handle: from x import y, from .x import y as z, from x import *
        for node in self.walk_tree(root, "import_from_statement"):
            module = ""
            relative_import = self.find_child(node, "relative_import")
            if relative_import is not None:
                module = self.get_node_text(relative_import, source)
            else:
                module_node = node.child_by_field_name("module_name")
                if module_node is not None:
                    module = self.get_node_text(module_node, source)

            # Imported names follow the 'import' keyword
            names = []
            found_import_keyword = False
            for child in node.children:
                if child.type == "import":
                    found_import_keyword = True
                elif found_import_keyword:
                    if child.type == "dotted_name":
                        names.append(self.get_node_text(child, source))
                    elif child.type == "aliased_import":
                        name_node = self.find_child(child, "dotted_name")
                        if name_node is not None:
                            names.append(self.get_node_text(name_node, source))
                    elif child.type == "wildcard_import":
                        names.append("*")

            if module:
                imports.append(ImportRecord(path=module, specifiers=names, line=node.start_point[0] + 1))

        return imports

    def extract_symbols(self, parsed: ParsedFile) -> list[Symbol]:
        """Extract module-level functions, classes with their methods, and assignments."""
        if parsed.tree is None:
            return []
        symbols: list[Symbol] = []
        for node in parsed.tree.root_node.children:
            self._collect(node, parsed, symbols)
        return symbols

    def _collect(
        self,
        node: Node,
        parsed: ParsedFile,
        symbols: list[Symbol],
        class_name: Optional[str] = None,
        decorators: Optional[list[str]] = None,
    ) -> None:
        source = parsed.source
        decorators = decorators or []

        if node.type == "decorated_definition":
            found = [self.get_node_text(d, source) for d in self.find_children(node, "decorator")]
            inner = node.child_by_field_name("definition")
            if inner is not None:
                self._collect(inner, parsed, symbols, class_name, found)

        elif node.type == "function_definition":
            name = self.field_text(node, "name", source)
            if not name:
                return
            body = node.child_by_field_name("body")
            symbols.append(self.make_symbol(
                parsed, name,
                SymbolKind.METHOD if class_name else SymbolKind.FUNCTION,
                node,
                framework_type=self._decorator_type(decorators),
                qualified_name=f"{class_name}.{name}" if class_name else name,
                signature=self.signature_of(node, source, body),
                documentation=self._docstring(body, source),
            ))

        elif node.type == "class_definition" and class_name is None:
            name = self.field_text(node, "name", source)
            if not name:
                return
            body = node.child_by_field_name("body")
            symbols.append(self.make_symbol(
                parsed, name, SymbolKind.CLASS, node,
                signature=self.signature_of(node, source, body),
                documentation=self._docstring(body, source),
            ))
            if body is not None:
                for member in body.children:
                    if member.type in ("function_definition", "decorated_definition"):
                        self._collect(member, parsed, symbols, class_name=name)

        elif node.type == "expression_statement" and class_name is None:
            assignment = self.find_child(node, "assignment")
            if assignment is None:
                return
            left = assignment.child_by_field_name("left")
            if left is None or left.type != "identifier":
                return
            name = self.get_node_text(left, source)
            symbols.append(self.make_symbol(
                parsed, name,
                SymbolKind.CONSTANT if name.isupper() else SymbolKind.VARIABLE,
                assignment,
                signature=self.signature_of(node, source),
            ))

    def _decorator_type(self, decorators: list[str]) -> Optional[FrameworkType]:
        for decorator in decorators:
            if ROUTE_DECORATOR.match(decorator):
                return FrameworkType.ROUTE
            if MIDDLEWARE_DECORATOR.match(decorator):
                return FrameworkType.MIDDLEWARE
        return None

    def _docstring(self, body: Optional[Node], source: bytes) -> str:
        """Return the docstring if the first statement in a block is a string."""
        if body is None or not body.named_children:
            return ""
        first = body.named_children[0]
        if first.type != "expression_statement" or not first.named_children:
            return ""
        string_node = first.named_children[0]
        if string_node.type != "string":
            return ""
        text = self.get_node_text(string_node, source).lstrip("rRuUbBfF")
        for quote in ('"""', "'''", '"', "'"):
            if text.startswith(quote) and text.endswith(quote) and len(text) >= 2 * len(quote):
                text = text[len(quote):-len(quote)]
                break
        return inspect.cleandoc(text)


register_extractor(PythonExtractor())
