"""
Graph Builder

Walks a target directory, filters paths through the PathMatcher, parses
supported files, and fills a fresh CodeGraph. Relationships and git
neighborhoods are added after the walk, then the graph is sealed.

The build runs on the calling thread. Progress messages go to a single
callback in this order:

    📄 Parsing files... (N files)     every ``interval`` files
    ✅ Parsing complete (N files)
    🔗 Building relationships...
    ✅ Relationships built
    📊 Analyzing git history...
    ⚠️ Git analysis skipped           only when git analysis was skipped or failed
"""

import logging
import os
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional

from codecontext.analyzer.path_matcher import PathMatcher
from codecontext.analyzer.relationships import RelationshipAnalyzer, build_basic_relationships
from codecontext.analyzer.semantic import build_semantic_neighborhoods
from codecontext.ast.parser import ParserManager
from codecontext.configs.constants import DEFAULT_PROGRESS_INTERVAL, MIN_PROGRESS_INTERVAL
from codecontext.configs.logging import get_logger
from codecontext.exceptions import (
    AnalysisCancelledError,
    AnalysisError,
    UnsupportedLanguageError,
    WalkError,
)
from codecontext.git.neighborhoods import SemanticConfig
from codecontext.graph.models import FileNode, GraphNode, NodeType, file_node_id, symbol_node_id
from codecontext.graph.store import CodeGraph

logger = get_logger("analyzer.builder")

ProgressCallback = Callable[[str], None]


def stats_for(graph: Optional[CodeGraph]) -> dict:
    """File, symbol, and language totals of one graph."""
    if graph is None:
        return {
            "total_files": 0,
            "total_symbols": 0,
            "languages": {},
            "analysis_time": 0.0,
            "last_analyzed": None,
        }
    meta = graph.metadata
    return {
        "total_files": meta.total_files,
        "total_symbols": meta.total_symbols,
        "languages": dict(meta.languages),
        "analysis_time": round(meta.analysis_time, 3),
        "last_analyzed": meta.generated.isoformat(),
    }


def walk_files(root: str) -> Iterator[str]:
    """
    Yield every non-directory entry below ``root``, depth-first, with the
    entries of each directory in lexicographic order. Symlinked
    directories are not followed.

    Raises:
        WalkError: If a directory cannot be listed
    """
    try:
        with os.scandir(root) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise WalkError(f"Failed to read directory {root}", {"error": str(e)})

    for entry in entries:
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError as e:
            raise WalkError(f"Failed to stat {entry.path}", {"error": str(e)})
        if is_dir:
            yield from walk_files(entry.path)
        else:
            yield entry.path


class GraphBuilder:
    """
    Builds a CodeGraph for a directory.

    One builder may be reused across runs; each ``analyze`` call creates a
    new graph and never touches the previous one.
    """

    def __init__(
        self,
        parser: Optional[ParserManager] = None,
        semantic_config: Optional[SemanticConfig] = None,
    ):
        self.parser = parser or ParserManager()
        self.semantic_config = semantic_config or SemanticConfig()
        self.logger = logger
        self.matcher = PathMatcher(log=self.logger)
        self.progress_callback: Optional[ProgressCallback] = None
        self.progress_interval = DEFAULT_PROGRESS_INTERVAL
        self.show_percentage = False
        self.graph: Optional[CodeGraph] = None

    # --- Configuration ---

    def set_exclude_patterns(self, patterns: list[str]) -> None:
        self.matcher.set_exclude_patterns(patterns)

    def set_use_default_excludes(self, use: bool) -> None:
        self.matcher.set_use_default_excludes(use)

    def set_progress_callback(self, callback: Optional[ProgressCallback]) -> None:
        self.progress_callback = callback
        self.matcher.set_progress_callback(callback)

    def set_progress_config(self, interval: int = DEFAULT_PROGRESS_INTERVAL, show_percentage: bool = False) -> None:
        """Intervals below the minimum are clamped to it."""
        self.progress_interval = max(MIN_PROGRESS_INTERVAL, int(interval))
        self.show_percentage = show_percentage

    def set_logger(self, log: logging.Logger) -> None:
        self.logger = log
        self.matcher.set_logger(log)

    def set_enable_dart(self, enable: bool) -> None:
        self.parser.set_enable_dart(enable)

    def _progress(self, message: str) -> None:
        if self.progress_callback is not None:
            self.progress_callback(message)

    # --- Analysis ---

    def analyze(self, target_dir: str, cancel_event: Optional[threading.Event] = None) -> CodeGraph:
        """
        Build a sealed graph for ``target_dir``.

        Raises:
            WalkError: If the directory tree cannot be walked
            ParseError: If a supported file fails to parse
            AnalysisCancelledError: If ``cancel_event`` is set during the walk
        """
        start = time.monotonic()
        root = os.path.abspath(target_dir)
        if not os.path.isdir(root):
            raise WalkError(f"Target directory does not exist: {target_dir}")

        graph = CodeGraph(root)
        self.logger.info(f"Analyzing {root}")

        file_count = 0
        for path in walk_files(root):
            if cancel_event is not None and cancel_event.is_set():
                raise AnalysisCancelledError(f"Analysis of {root} was cancelled")

            path = self.matcher.normalize(path)
            if not self.parser.is_supported_file(path):
                continue
            rel_path = self.matcher.normalize(os.path.relpath(path, root))
            if self.matcher.should_skip(rel_path) or self.matcher.should_skip(path):
                continue

            file_count += 1
            if file_count % self.progress_interval == 0:
                self._progress(f"📄 Parsing files... ({file_count} files)")

            self.process_file(path, graph)

        self._progress(f"✅ Parsing complete ({file_count} files)")

        self._progress("🔗 Building relationships...")
        self._build_relationships(graph)
        self._progress("✅ Relationships built")

        self._progress("📊 Analyzing git history...")
        semantic = build_semantic_neighborhoods(root, graph, self.semantic_config)
        graph.metadata.configuration["semantic_neighborhoods"] = semantic
        if semantic.error or not semantic.analysis_metadata.is_git_repository:
            self._progress("⚠️ Git analysis skipped")

        graph.metadata.configuration.update({
            "target_dir": root,
            "exclude_patterns": self.matcher.exclude_patterns
            + ["!" + p for p in self.matcher.include_patterns],
            "use_default_excludes": self.matcher.use_default_excludes,
        })
        graph.metadata.total_files = len(graph.files)
        graph.metadata.total_symbols = len(graph.symbols)
        graph.metadata.analysis_time = time.monotonic() - start
        graph.seal()

        self.graph = graph
        self.logger.info(
            f"Analysis complete: {graph.metadata.total_files} files, "
            f"{graph.metadata.total_symbols} symbols, {len(graph.edges)} edges "
            f"in {graph.metadata.analysis_time:.2f}s"
        )
        return graph

    def process_file(self, path: str, graph: CodeGraph) -> Optional[FileNode]:
        """
        Parse one file and register it, its symbols, and their nodes.

        Returns None when the file type is not supported.

        Raises:
            ParseError: If reading, parsing, or extraction fails
        """
        try:
            classification = self.parser.classify(path, graph.root_dir)
        except UnsupportedLanguageError:
            return None

        language = classification.language
        parsed = self.parser.parse_file(path, language, graph.root_dir)
        symbols = self.parser.extract_symbols(parsed)
        imports = self.parser.extract_imports(parsed)

        try:
            mtime = os.stat(path).st_mtime
            last_modified = datetime.fromtimestamp(mtime, tz=timezone.utc)
        except OSError:
            last_modified = None

        file_node = FileNode(
            path=path,
            language=language.name,
            size=parsed.size,
            lines=parsed.line_count,
            symbol_count=len(symbols),
            import_count=len(imports),
            is_test=classification.is_test,
            is_generated=classification.is_generated,
            last_modified=last_modified,
            imports=imports,
            metadata={"parse_quality": parsed.quality},
        )
        if parsed.errors:
            file_node.metadata["parse_errors"] = len(parsed.errors)
            file_node.metadata["first_error"] = parsed.errors[0]

        for symbol in symbols:
            graph.add_symbol(symbol, path)
            file_node.symbols.append(symbol.id)
            graph.add_node(GraphNode(
                id=symbol_node_id(symbol.id),
                type=NodeType.SYMBOL,
                label=symbol.name,
                file_path=path,
                metadata={
                    "kind": symbol.kind.value,
                    "framework_type": symbol.framework_type.value if symbol.framework_type else None,
                    "line": symbol.location.start_line,
                },
            ))

        graph.add_node(GraphNode(
            id=file_node_id(path),
            type=NodeType.FILE,
            label=os.path.basename(path),
            file_path=path,
            metadata={"language": language.name},
        ))
        graph.add_file(file_node)
        languages = graph.metadata.languages
        languages[language.name] = languages.get(language.name, 0) + 1
        return file_node

    def _build_relationships(self, graph: CodeGraph) -> None:
        analyzer = RelationshipAnalyzer(graph, self.matcher, self.logger)
        try:
            metrics = analyzer.analyze_all_relationships()
        except AnalysisError as e:
            self.logger.warning(f"Relationship analysis failed, using basic resolver: {e}")
            created = build_basic_relationships(graph, self.matcher, self.logger)
            metrics = {"total_edges": len(graph.edges), "import_edges": created}
        graph.metadata.configuration["relationship_metrics"] = metrics

    def get_file_stats(self) -> dict:
        """Totals for the most recent graph; empty shape before any analysis."""
        return stats_for(self.graph)

