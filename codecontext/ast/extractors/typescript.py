"""
TypeScript/JavaScript Extractor

Extracts symbols and imports from TS/JS/TSX/JSX files using tree-sitter,
tagging React, Vue, Angular, Svelte, and Next.js constructs with a
framework sub-type.
"""

import posixpath
from typing import Optional

from tree_sitter import Node

from codecontext.ast.extractors.base import (
    LanguageExtractor,
    is_hook_name,
    is_pascal_case,
    register_extractor,
)
from codecontext.ast.models import ParsedFile
from codecontext.graph.models import FrameworkType, ImportRecord, Symbol, SymbolKind

JSX_NODE_TYPES = {"jsx_element", "jsx_self_closing_element", "jsx_fragment"}

FUNCTION_VALUE_TYPES = {"arrow_function", "function_expression", "function", "generator_function"}

# Decorator name -> sub-type (Angular)
DECORATOR_TYPES = {
    "Component": FrameworkType.COMPONENT,
    "Injectable": FrameworkType.SERVICE,
    "Directive": FrameworkType.DIRECTIVE,
}

# Initializer call -> sub-type (Vue, Svelte, Pinia, Redux)
CALL_TYPES = {
    "computed": FrameworkType.COMPUTED,
    "watch": FrameworkType.WATCHER,
    "watchEffect": FrameworkType.WATCHER,
    "writable": FrameworkType.STORE,
    "readable": FrameworkType.STORE,
    "derived": FrameworkType.STORE,
    "defineStore": FrameworkType.STORE,
    "createStore": FrameworkType.STORE,
    "createSlice": FrameworkType.STORE,
    "createAction": FrameworkType.ACTION,
    "createAsyncThunk": FrameworkType.ACTION,
}

LIFECYCLE_METHODS = {
    # React
    "componentDidMount",
    "componentDidUpdate",
    "componentWillUnmount",
    "shouldComponentUpdate",
    "componentDidCatch",
    "getDerivedStateFromProps",
    "getSnapshotBeforeUpdate",
    # Angular
    "ngOnInit",
    "ngOnDestroy",
    "ngOnChanges",
    "ngDoCheck",
    "ngAfterViewInit",
    "ngAfterViewChecked",
    "ngAfterContentInit",
    "ngAfterContentChecked",
    # Vue
    "beforeCreate",
    "created",
    "beforeMount",
    "mounted",
    "beforeUpdate",
    "updated",
    "beforeUnmount",
    "unmounted",
}

HTTP_METHOD_EXPORTS = {"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"}

NEXT_APP_ROUTE_FILES = {"page", "layout", "route", "template", "loading", "error", "not-found", "default"}


def _string_value(text: str) -> str:
    if len(text) >= 2 and text[0] in "'\"`" and text[-1] == text[0]:
        return text[1:-1]
    return text


def _decorator_name(text: str) -> str:
    return text.lstrip("@").split("(", 1)[0].split(".")[-1].strip()


class TypeScriptExtractor(LanguageExtractor):
    """Extracts symbols and imports from TypeScript and JavaScript sources."""

    @property
    def languages(self) -> tuple[str, ...]:
        return ("typescript", "javascript")

    # --- Imports ---

    def extract_imports(self, parsed: ParsedFile) -> list[ImportRecord]:
        """Extract ES imports, re-exports with a source, and require() calls."""
        if parsed.tree is None:
            return []
        source = parsed.source
        root = parsed.tree.root_node
        records = []

        for node in root.children:
            if node.type == "import_statement":
                source_node = node.child_by_field_name("source") or self.find_child(node, "string")
                if source_node is None:
                    continue
                specifiers, is_default = self._import_clause(node, source)
                records.append(ImportRecord(
                    path=_string_value(self.get_node_text(source_node, source)),
                    specifiers=specifiers,
                    is_default=is_default,
                    line=node.start_point[0] + 1,
                ))
            elif node.type == "export_statement":
                source_node = node.child_by_field_name("source")
                if source_node is None:
                    continue
                specifiers = []
                clause = self.find_child(node, "export_clause")
                if clause is not None:
                    for spec in self.find_children(clause, "export_specifier"):
                        name_node = spec.child_by_field_name("name")
                        if name_node is not None:
                            specifiers.append(self.get_node_text(name_node, source))
                else:
                    specifiers.append("*")
                records.append(ImportRecord(
                    path=_string_value(self.get_node_text(source_node, source)),
                    specifiers=specifiers,
                    line=node.start_point[0] + 1,
                ))

        for call in self.walk_tree(root, "call_expression"):
            function = call.child_by_field_name("function")
            if function is None or function.type != "identifier":
                continue
            if self.get_node_text(function, source) != "require":
                continue
            arguments = call.child_by_field_name("arguments")
            string_node = self.find_child(arguments, "string") if arguments is not None else None
            if string_node is not None:
                records.append(ImportRecord(
                    path=_string_value(self.get_node_text(string_node, source)),
                    is_default=True,
                    line=call.start_point[0] + 1,
                ))

        return records

    def _import_clause(self, node: Node, source: bytes) -> tuple[list[str], bool]:
        clause = self.find_child(node, "import_clause")
        if clause is None:
            return [], False

        specifiers = []
        is_default = False
        for child in clause.children:
            if child.type == "identifier":
                specifiers.append(self.get_node_text(child, source))
                is_default = True
            elif child.type == "named_imports":
                for spec in self.find_children(child, "import_specifier"):
                    name_node = spec.child_by_field_name("name")
                    if name_node is not None:
                        specifiers.append(self.get_node_text(name_node, source))
            elif child.type == "namespace_import":
                specifiers.append("*")
        return specifiers, is_default

    # --- Symbols ---

    def extract_symbols(self, parsed: ParsedFile) -> list[Symbol]:
        """Extract top-level declarations, exported or not, and class members."""
        if parsed.tree is None:
            return []
        symbols: list[Symbol] = []
        for node in parsed.tree.root_node.children:
            if node.type == "export_statement":
                declaration = node.child_by_field_name("declaration")
                if declaration is None:
                    continue
                is_default = self.find_child(node, "default") is not None
                decorators = [
                    self.get_node_text(d, parsed.source) for d in self.find_children(node, "decorator")
                ]
                self._collect(declaration, parsed, symbols, doc_node=node,
                              is_default=is_default, decorators=decorators)
            else:
                self._collect(node, parsed, symbols, doc_node=node)
        return symbols

    def _collect(
        self,
        node: Node,
        parsed: ParsedFile,
        symbols: list[Symbol],
        doc_node: Node,
        is_default: bool = False,
        decorators: Optional[list[str]] = None,
    ) -> None:
        source = parsed.source
        documentation = self.leading_comment(doc_node, source)

        if node.type in ("function_declaration", "generator_function_declaration"):
            name = self.field_text(node, "name", source)
            if not name:
                return
            symbols.append(self.make_symbol(
                parsed, name, SymbolKind.FUNCTION, node,
                framework_type=self._function_type(name, node, parsed, is_default),
                signature=self.signature_of(node, source, node.child_by_field_name("body")),
                documentation=documentation,
            ))

        elif node.type in ("lexical_declaration", "variable_declaration"):
            is_const = self.find_child(node, "const") is not None
            for declarator in self.find_children(node, "variable_declarator"):
                self._collect_declarator(declarator, node, parsed, symbols, is_const, documentation)

        elif node.type in ("class_declaration", "abstract_class_declaration"):
            self._collect_class(node, parsed, symbols, decorators or [], documentation)

        elif node.type == "interface_declaration":
            self._simple(node, parsed, symbols, SymbolKind.INTERFACE, documentation)

        elif node.type == "type_alias_declaration":
            self._simple(node, parsed, symbols, SymbolKind.TYPE, documentation)

        elif node.type == "enum_declaration":
            self._simple(node, parsed, symbols, SymbolKind.ENUM, documentation)

    def _simple(self, node: Node, parsed: ParsedFile, symbols: list[Symbol],
                kind: SymbolKind, documentation: str) -> None:
        name = self.field_text(node, "name", parsed.source)
        if name:
            symbols.append(self.make_symbol(
                parsed, name, kind, node,
                signature=self.signature_of(node, parsed.source, node.child_by_field_name("body")),
                documentation=documentation,
            ))

    def _collect_declarator(
        self,
        declarator: Node,
        declaration: Node,
        parsed: ParsedFile,
        symbols: list[Symbol],
        is_const: bool,
        documentation: str,
    ) -> None:
        source = parsed.source
        name_node = declarator.child_by_field_name("name")
        if name_node is None or name_node.type != "identifier":
            return
        name = self.get_node_text(name_node, source)
        value = declarator.child_by_field_name("value")

        if value is not None and value.type in FUNCTION_VALUE_TYPES:
            symbols.append(self.make_symbol(
                parsed, name, SymbolKind.FUNCTION, declarator,
                framework_type=self._function_type(name, value, parsed, False),
                signature=self.signature_of(declaration, source, value.child_by_field_name("body")),
                documentation=documentation,
            ))
            return

        framework_type = None
        if value is not None and value.type == "call_expression":
            framework_type = CALL_TYPES.get(self._callee_name(value, source))

        kind = SymbolKind.CONSTANT if is_const and name.isupper() else SymbolKind.VARIABLE
        symbols.append(self.make_symbol(
            parsed, name, kind, declarator,
            framework_type=framework_type,
            signature=self.signature_of(declaration, source),
            documentation=documentation,
        ))

    def _collect_class(
        self,
        node: Node,
        parsed: ParsedFile,
        symbols: list[Symbol],
        decorators: list[str],
        documentation: str,
    ) -> None:
        source = parsed.source
        class_name = self.field_text(node, "name", source)
        if not class_name:
            return

        decorators = decorators + [self.get_node_text(d, source) for d in self.find_children(node, "decorator")]
        framework_type = None
        for decorator in decorators:
            framework_type = DECORATOR_TYPES.get(_decorator_name(decorator))
            if framework_type is not None:
                break
        if framework_type is None:
            heritage = self.find_child(node, "class_heritage")
            if heritage is not None:
                heritage_text = self.get_node_text(heritage, source)
                if "Component" in heritage_text or "PureComponent" in heritage_text:
                    framework_type = FrameworkType.COMPONENT

        body = node.child_by_field_name("body")
        symbols.append(self.make_symbol(
            parsed, class_name, SymbolKind.CLASS, node,
            framework_type=framework_type,
            signature=self.signature_of(node, source, body),
            documentation=documentation,
        ))
        if body is None:
            return

        for member in body.children:
            if member.type != "method_definition":
                continue
            method_name = self.field_text(member, "name", source)
            if not method_name:
                continue
            method_type = FrameworkType.LIFECYCLE if method_name in LIFECYCLE_METHODS else None
            symbols.append(self.make_symbol(
                parsed, method_name, SymbolKind.METHOD, member,
                framework_type=method_type,
                qualified_name=f"{class_name}.{method_name}",
                signature=self.signature_of(member, source, member.child_by_field_name("body")),
                documentation=self.leading_comment(member, source),
            ))

    def _callee_name(self, call: Node, source: bytes) -> str:
        function = call.child_by_field_name("function")
        if function is None:
            return ""
        return self.get_node_text(function, source).split(".")[-1]

    def _function_type(
        self,
        name: str,
        node: Node,
        parsed: ParsedFile,
        is_default: bool,
    ) -> Optional[FrameworkType]:
        path = "/" + (parsed.rel_path or parsed.path).replace("\\", "/").lstrip("/")
        stem = posixpath.basename(path).split(".", 1)[0]

        if is_hook_name(name):
            return FrameworkType.HOOK
        if name == "middleware" and stem == "middleware":
            return FrameworkType.MIDDLEWARE
        if _is_next_route_file(path, stem) and (is_default or name in HTTP_METHOD_EXPORTS):
            return FrameworkType.ROUTE
        if is_pascal_case(name):
            if path.endswith((".jsx", ".tsx")) or self.contains_type(node, JSX_NODE_TYPES):
                return FrameworkType.COMPONENT
        return None


def _is_next_route_file(path: str, stem: str) -> bool:
    if "/pages/" in path:
        return True
    return "/app/" in path and stem in NEXT_APP_ROUTE_FILES


register_extractor(TypeScriptExtractor())
