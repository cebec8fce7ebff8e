"""
Parser Manager

Front for the language grammars: classifies files by extension, parses
them (tree-sitter for code, json/PyYAML for data, regex for Markdown and
Dart), and delegates symbol/import extraction to registered extractors.
"""

import json
import os
from pathlib import Path
from typing import Optional

import tree_sitter_go
import tree_sitter_java
import tree_sitter_python
import tree_sitter_rust
import tree_sitter_typescript
import yaml
from tree_sitter import Language as TSLanguage
from tree_sitter import Node, Parser

from codecontext.ast.extractors import get_extractor
from codecontext.ast.models import (
    QUALITY_BASIC,
    QUALITY_COMPLETE,
    QUALITY_PARTIAL,
    FileClassification,
    Language,
    ParsedFile,
)
from codecontext.configs.constants import DART_EXTENSIONS, LANGUAGE_EXTENSIONS, MAX_FILE_SIZE
from codecontext.configs.logging import get_logger
from codecontext.exceptions import ParseError, UnsupportedLanguageError
from codecontext.graph.models import ImportRecord, Symbol

logger = get_logger("ast.parser")


# Tree-sitter grammars by name
GRAMMAR_MODULES = {
    "python": tree_sitter_python.language,
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
    "go": tree_sitter_go.language,
    "java": tree_sitter_java.language,
    "rust": tree_sitter_rust.language,
}

# Languages and the grammar (or decoder) used for each
LANGUAGES = [
    Language("typescript", LANGUAGE_EXTENSIONS["typescript"], "typescript"),
    Language("javascript", LANGUAGE_EXTENSIONS["javascript"], "tsx"),
    Language("go", LANGUAGE_EXTENSIONS["go"], "go"),
    Language("python", LANGUAGE_EXTENSIONS["python"], "python"),
    Language("java", LANGUAGE_EXTENSIONS["java"], "java"),
    Language("rust", LANGUAGE_EXTENSIONS["rust"], "rust"),
    Language("json", LANGUAGE_EXTENSIONS["json"], "json"),
    Language("yaml", LANGUAGE_EXTENSIONS["yaml"], "yaml"),
    Language("markdown", LANGUAGE_EXTENSIONS["markdown"], "markdown"),
]

DART = Language("dart", DART_EXTENSIONS, "regex")

# Per-extension grammar overrides (TSX needs the JSX-aware grammar)
GRAMMAR_OVERRIDES = {".tsx": "tsx"}

TEST_DIRECTORIES = {"test", "tests", "__tests__", "spec"}
GENERATED_SUFFIXES = (".pb.go", "_pb2.py", ".g.dart", ".freezed.dart", ".min.js")


class ParserManager:
    """
    Tree-sitter backed parser facade.

    Lazily initializes one tree-sitter parser per grammar on first use.
    """

    def __init__(self, enable_dart: bool = False):
        self._parsers: dict[str, Parser] = {}
        self._enable_dart = enable_dart

    def set_enable_dart(self, enable: bool) -> None:
        self._enable_dart = enable

    def supported_languages(self) -> list[Language]:
        languages = list(LANGUAGES)
        if self._enable_dart:
            languages.append(DART)
        return languages

    def _language_for(self, path: str) -> Optional[Language]:
        ext = os.path.splitext(path)[1].lower()
        for language in self.supported_languages():
            if ext in language.extensions:
                return language
        return None

    def is_supported_file(self, path: str) -> bool:
        """True if the extension belongs to a supported language."""
        return self._language_for(path) is not None

    def classify(self, path: str, root_dir: str = "") -> FileClassification:
        """
        Classify a file by extension and path conventions.

        Path conventions are checked relative to ``root_dir`` when given, so
        directories above the project never mark its files as tests.

        Raises:
            UnsupportedLanguageError: If no language handles the extension
        """
        language = self._language_for(path)
        if language is None:
            raise UnsupportedLanguageError(f"Unsupported file type: {path}")
        return FileClassification(
            language=language,
            is_test=is_test_file(os.path.relpath(path, root_dir) if root_dir else path),
            is_generated=is_generated_file(path),
        )

    def _get_parser(self, grammar: str) -> Parser:
        """Get or create the tree-sitter Parser for a grammar."""
        parser = self._parsers.get(grammar)
        if parser is not None:
            return parser

        module = GRAMMAR_MODULES.get(grammar)
        if module is None:
            raise ParseError(f"No tree-sitter grammar for {grammar}")
        try:
            parser = Parser(TSLanguage(module()))
        except (TypeError, ValueError) as e:
            raise ParseError(f"Failed to load {grammar} grammar", {"error": str(e)})
        self._parsers[grammar] = parser
        return parser

    def parse_file(self, path: str, language: Language, root_dir: str = "") -> ParsedFile:
        """
        Read and parse a file.

        Recoverable syntax problems give a ``partial`` result rather than
        an error.

        Raises:
            ParseError: If the file cannot be read or the grammar is unavailable
        """
        try:
            source = Path(path).read_bytes()
        except OSError as e:
            raise ParseError(f"Failed to read file {path}", {"error": str(e)})

        content = source.decode("utf-8", errors="replace")
        rel_path = os.path.relpath(path, root_dir) if root_dir else path
        parsed = ParsedFile(
            path=path,
            language=language,
            content=content,
            source=source,
            size=len(source),
            rel_path=rel_path.replace("\\", "/"),
        )

        if len(source) > MAX_FILE_SIZE:
            parsed.quality = QUALITY_BASIC
            parsed.errors.append(f"File exceeds {MAX_FILE_SIZE} bytes; symbols not extracted")
            return parsed

        if language.parser == "json":
            self._decode(parsed, json.loads, json.JSONDecodeError)
        elif language.parser == "yaml":
            self._decode(parsed, yaml.safe_load, yaml.YAMLError)
        elif language.parser in ("markdown", "regex"):
            parsed.quality = QUALITY_BASIC
        else:
            grammar = GRAMMAR_OVERRIDES.get(os.path.splitext(path)[1].lower(), language.parser)
            parsed.tree = self._get_parser(grammar).parse(source)
            if parsed.tree.root_node.has_error:
                parsed.quality = QUALITY_PARTIAL
                parsed.errors = _syntax_errors(parsed.tree.root_node)
                logger.debug(f"Partial parse for {path}: {len(parsed.errors)} error(s)")

        return parsed

    def _decode(self, parsed: ParsedFile, loader, error_type: type[Exception]) -> None:
        try:
            parsed.data = loader(parsed.content)
        except (error_type, RecursionError) as e:
            # Nesting deeper than the interpreter stack counts as unparseable
            parsed.quality = QUALITY_PARTIAL
            parsed.errors.append(str(e).split("\n", 1)[0])

    def extract_symbols(self, parsed: ParsedFile) -> list[Symbol]:
        if parsed.quality == QUALITY_BASIC and parsed.size > MAX_FILE_SIZE:
            return []
        extractor = get_extractor(parsed.language.name)
        if extractor is None:
            raise ParseError(f"No extractor for {parsed.language.name}")
        return extractor.extract_symbols(parsed)

    def extract_imports(self, parsed: ParsedFile) -> list[ImportRecord]:
        if parsed.quality == QUALITY_BASIC and parsed.size > MAX_FILE_SIZE:
            return []
        extractor = get_extractor(parsed.language.name)
        if extractor is None:
            raise ParseError(f"No extractor for {parsed.language.name}")
        return extractor.extract_imports(parsed)


def _syntax_errors(root: Node, limit: int = 20) -> list[str]:
    """Locations of ERROR and MISSING nodes, capped at ``limit``."""
    errors = []
    stack = [root]
    while stack and len(errors) < limit:
        node = stack.pop()
        if node.type == "ERROR":
            errors.append(f"Syntax error at line {node.start_point[0] + 1}, column {node.start_point[1] + 1}")
        elif node.is_missing:
            errors.append(f"Missing {node.type} at line {node.start_point[0] + 1}, column {node.start_point[1] + 1}")
        if node.has_error:
            stack.extend(reversed(node.children))
    return errors


def is_test_file(path: str) -> bool:
    """Check if file is a test file based on path/name."""
    p = Path(path.replace("\\", "/"))
    name = p.name.lower()
    parts = {part.lower() for part in p.parts[:-1]}

    if name.startswith("test_") or name.endswith(("_test.py", "_test.go", "_test.dart")):
        return True
    if ".test." in name or ".spec." in name:
        return True
    if p.name.endswith(("Test.java", "Tests.java")):
        return True
    return bool(parts & TEST_DIRECTORIES)


def is_generated_file(path: str) -> bool:
    """Check if file is generated code based on its name."""
    name = os.path.basename(path).lower()
    return name.endswith(GENERATED_SUFFIXES) or ".generated." in name
