"""
Data File Extractor

JSON and YAML documents are decoded by the parser; their top-level keys
become ``property`` symbols.
"""

import re

from codecontext.ast.extractors.base import LanguageExtractor, register_extractor
from codecontext.ast.models import ParsedFile
from codecontext.graph.models import ImportRecord, Location, Symbol, SymbolKind


class DataExtractor(LanguageExtractor):
    """Top-level keys of JSON and YAML mappings."""

    @property
    def languages(self) -> tuple[str, ...]:
        return ("json", "yaml")

    def extract_imports(self, parsed: ParsedFile) -> list[ImportRecord]:
        return []

    def extract_symbols(self, parsed: ParsedFile) -> list[Symbol]:
        if not isinstance(parsed.data, dict):
            return []
        symbols = []
        seen = set()
        for key in parsed.data:
            name = str(key)
            # YAML keys 1 and "1" render the same
            if name in seen:
                continue
            seen.add(name)
            line = self._key_line(parsed, name)
            symbols.append(self.make_symbol(
                parsed, name, SymbolKind.PROPERTY,
                location=Location(start_line=line, end_line=line),
                signature=name,
            ))
        return symbols

    def _key_line(self, parsed: ParsedFile, key: str) -> int:
        escaped = re.escape(key)
        if parsed.language.name == "json":
            pattern = re.compile(rf'"{escaped}"\s*:')
        else:
            pattern = re.compile(rf"^['\"]?{escaped}['\"]?\s*:", re.MULTILINE)
        match = pattern.search(parsed.content)
        if match is None:
            return 1
        return parsed.content.count("\n", 0, match.start()) + 1


register_extractor(DataExtractor())
