"""
Markdown Extractor

ATX headings become ``heading`` symbols; fenced code blocks are skipped.
"""

import re

from codecontext.ast.extractors.base import LanguageExtractor, register_extractor
from codecontext.ast.models import ParsedFile
from codecontext.graph.models import ImportRecord, Location, Symbol, SymbolKind

HEADING = re.compile(r"^(#{1,6})\s+(.+?)\s*#*\s*$")
FENCE = re.compile(r"^\s*(```|~~~)")


class MarkdownExtractor(LanguageExtractor):
    """Headings of Markdown documents."""

    @property
    def languages(self) -> tuple[str, ...]:
        return ("markdown",)

    def extract_imports(self, parsed: ParsedFile) -> list[ImportRecord]:
        return []

    def extract_symbols(self, parsed: ParsedFile) -> list[Symbol]:
        symbols = []
        in_fence = False
        for index, line in enumerate(parsed.content.splitlines(), start=1):
            if FENCE.match(line):
                in_fence = not in_fence
                continue
            if in_fence:
                continue
            match = HEADING.match(line)
            if match is None:
                continue
            level, title = match.groups()
            symbols.append(self.make_symbol(
                parsed, title, SymbolKind.HEADING,
                location=Location(start_line=index, end_line=index, start_col=1, end_col=len(line) + 1),
                signature=f"{level} {title}",
            ))
        return symbols


register_extractor(MarkdownExtractor())
