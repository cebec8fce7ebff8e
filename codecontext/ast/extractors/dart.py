"""
Dart/Flutter Extractor

Regex-based extraction (basic quality) for Dart sources, with Flutter
widget, state, build, and lifecycle detection.
"""

import re
from typing import Optional

from codecontext.ast.extractors.base import LanguageExtractor, register_extractor
from codecontext.ast.models import ParsedFile
from codecontext.graph.models import FrameworkType, ImportRecord, Location, Symbol, SymbolKind

IMPORT = re.compile(r"""(?m)^\s*(import|export|part)\s+['"]([^'"]+)['"](?:\s+as\s+(\w+))?[^;\n]*;""")

CLASS = re.compile(
    r"(?m)^(?:(?:sealed|final|base|interface|mixin)\s+)?(?:abstract\s+)?class\s+(\w+)"
    r"(?:<[^>{]*>)?(?:\s+extends\s+([\w<>, ?]+?))?(?:\s+with\s+[\w\s,<>?]+?)?"
    r"(?:\s+implements\s+[\w\s,<>?]+?)?\s*\{"
)
MIXIN = re.compile(r"(?m)^(?:base\s+)?mixin\s+(?!class\b)(\w+)")
EXTENSION = re.compile(r"(?m)^extension\s+(\w*)\s*(?:<[^>]*>)?\s*on\s+([\w<>\[\], ?]+?)\s*\{")
ENUM = re.compile(r"(?m)^enum\s+(\w+)")
TYPEDEF = re.compile(r"(?m)^typedef\s+(\w+)")
FUNCTION = re.compile(r"(?m)^(?:[\w<>\[\]?,]+\s+)?(\w+)\s*\([^)]*\)\s*(?:async\s*\*?\s*)?(?:\{|=>)")
BUILD_METHOD = re.compile(r"(?m)^\s+(?:@override\s+)?Widget\s+(build)\s*\(\s*BuildContext\s+\w+\s*\)")
LIFECYCLE_METHOD = re.compile(
    r"(?m)^\s+@override\s+void\s+(initState|dispose|didUpdateWidget|didChangeDependencies)\s*\("
)

WIDGET_BASES = ("StatelessWidget", "StatefulWidget")
KEYWORDS = {"if", "for", "while", "switch", "catch", "return"}


class DartExtractor(LanguageExtractor):
    """Regex extraction for Dart and Flutter sources."""

    @property
    def languages(self) -> tuple[str, ...]:
        return ("dart",)

    def extract_imports(self, parsed: ParsedFile) -> list[ImportRecord]:
        records = []
        for match in IMPORT.finditer(parsed.content):
            alias = match.group(3)
            records.append(ImportRecord(
                path=match.group(2),
                specifiers=[alias] if alias else [],
                line=self._line(parsed, match.start()),
            ))
        return records

    def extract_symbols(self, parsed: ParsedFile) -> list[Symbol]:
        content = parsed.content
        symbols: list[Symbol] = []
        classes: list[tuple[int, str]] = []

        for match in CLASS.finditer(content):
            name, base = match.group(1), (match.group(2) or "").strip()
            framework_type = None
            if base in WIDGET_BASES:
                framework_type = FrameworkType.WIDGET
            elif base.startswith("State<"):
                framework_type = FrameworkType.STATE_CLASS
            classes.append((match.start(), name))
            symbols.append(self._symbol(parsed, match, name, SymbolKind.CLASS, framework_type))

        for pattern, kind, framework_type in (
            (MIXIN, SymbolKind.MIXIN, FrameworkType.MIXIN),
            (ENUM, SymbolKind.ENUM, FrameworkType.ENUM),
            (TYPEDEF, SymbolKind.TYPEDEF, FrameworkType.TYPEDEF),
        ):
            for match in pattern.finditer(content):
                symbols.append(self._symbol(parsed, match, match.group(1), kind, framework_type))

        for match in EXTENSION.finditer(content):
            name = match.group(1) or f"on {match.group(2).strip()}"
            symbols.append(self._symbol(parsed, match, name, SymbolKind.EXTENSION, FrameworkType.EXTENSION))

        for match in FUNCTION.finditer(content):
            name = match.group(1)
            if name in KEYWORDS:
                continue
            symbols.append(self._symbol(parsed, match, name, SymbolKind.FUNCTION, None))

        for pattern, framework_type in (
            (BUILD_METHOD, FrameworkType.BUILD_METHOD),
            (LIFECYCLE_METHOD, FrameworkType.LIFECYCLE),
        ):
            for match in pattern.finditer(content):
                owner = self._enclosing_class(classes, match.start())
                symbols.append(self._symbol(
                    parsed, match, match.group(1), SymbolKind.METHOD, framework_type, owner=owner,
                ))

        symbols.sort(key=lambda s: (s.location.start_line, s.location.start_col))
        return symbols

    def _symbol(
        self,
        parsed: ParsedFile,
        match: re.Match,
        name: str,
        kind: SymbolKind,
        framework_type: Optional[FrameworkType],
        owner: str = "",
    ) -> Symbol:
        start = match.start(1)
        line = self._line(parsed, start)
        column = start - (parsed.content.rfind("\n", 0, start) + 1) + 1
        return self.make_symbol(
            parsed, name, kind,
            location=Location(start_line=line, end_line=self._line(parsed, match.end()), start_col=column),
            framework_type=framework_type,
            qualified_name=f"{owner}.{name}" if owner else name,
            signature=" ".join(match.group(0).split()).rstrip(" {=>"),
        )

    def _line(self, parsed: ParsedFile, offset: int) -> int:
        return parsed.content.count("\n", 0, offset) + 1

    def _enclosing_class(self, classes: list[tuple[int, str]], offset: int) -> str:
        owner = ""
        for start, name in classes:
            if start > offset:
                break
            owner = name
        return owner


register_extractor(DartExtractor())
