"""
Context Map Rendering

Renders a CodeGraph as the Markdown overview returned by
``get_codebase_overview``.
"""

import posixpath
from collections import Counter, defaultdict
from datetime import datetime, timezone

from codecontext.graph.models import EdgeType, Symbol
from codecontext.graph.store import CodeGraph, path_from_node_id

MAX_SYMBOLS_PER_FILE = 5
MAX_FILES_PER_DIRECTORY = 20
MAX_IMPORTED_FILES = 10
MAX_NEIGHBORHOODS = 5


class MarkdownGenerator:
    """Builds the context map for one graph snapshot."""

    def __init__(self, graph: CodeGraph):
        self.graph = graph

    def generate_context_map(self) -> str:
        sections = [
            self._header(),
            self._languages(),
            self._most_imported(),
            self._structure(),
            self._neighborhoods(),
        ]
        return "\n".join(s for s in sections if s).rstrip() + "\n"

    def _header(self) -> str:
        meta = self.graph.metadata
        generated = meta.generated.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
        import_edges = sum(1 for _ in self.graph.iter_edges(EdgeType.IMPORTS))
        name = posixpath.basename(self.graph.root_dir.rstrip("/\\")) or self.graph.root_dir
        lines = [
            f"# CodeContext Map: {name}",
            "",
            f"**Generated:** {generated}",
            f"**Version:** {meta.version}",
            f"**Analysis Time:** {meta.analysis_time:.2f}s",
            "",
            "## 📊 Overview",
            "",
            f"- **Total Files:** {meta.total_files}",
            f"- **Total Symbols:** {meta.total_symbols}",
            f"- **Import Relationships:** {import_edges}",
            f"- **Languages:** {len(meta.languages)}",
            "",
        ]
        return "\n".join(lines)

    def _languages(self) -> str:
        languages = self.graph.metadata.languages
        if not languages:
            return ""
        total = sum(languages.values())
        lines = [
            "## 🗂️ Languages",
            "",
            "| Language | Files | Share |",
            "|----------|-------|-------|",
        ]
        for language, count in sorted(languages.items(), key=lambda kv: (-kv[1], kv[0])):
            lines.append(f"| {language} | {count} | {count / total:.0%} |")
        lines.append("")
        return "\n".join(lines)

    def _most_imported(self) -> str:
        counts: Counter = Counter(
            path_from_node_id(edge.target) for edge in self.graph.iter_edges(EdgeType.IMPORTS)
        )
        if not counts:
            return ""
        lines = ["## 🔗 Most Imported Files", ""]
        for path, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[:MAX_IMPORTED_FILES]:
            lines.append(f"- `{self.graph.relative_path(path)}` ({count} imports)")
        lines.append("")
        return "\n".join(lines)

    def _structure(self) -> str:
        if not self.graph.files:
            return "## 📁 Files\n\nNo supported source files found.\n"

        by_directory: dict[str, list[str]] = defaultdict(list)
        for path in self.graph.files:
            rel = self.graph.relative_path(path)
            by_directory[posixpath.dirname(rel) or "."].append(path)

        lines = ["## 📁 Files", ""]
        for directory in sorted(by_directory):
            paths = sorted(by_directory[directory])
            lines.append(f"### {directory}/")
            lines.append("")
            for path in paths[:MAX_FILES_PER_DIRECTORY]:
                file_node = self.graph.files[path]
                flags = []
                if file_node.is_test:
                    flags.append("test")
                if file_node.is_generated:
                    flags.append("generated")
                suffix = f" _({', '.join(flags)})_" if flags else ""
                lines.append(
                    f"- **{posixpath.basename(self.graph.relative_path(path))}** "
                    f"({file_node.language}, {file_node.lines} lines){suffix}"
                )
                top = _top_symbols(self.graph.symbols_in_file(path))
                if top:
                    lines.append("  - " + ", ".join(f"`{s.name}` ({s.display_type})" for s in top))
            hidden = len(paths) - MAX_FILES_PER_DIRECTORY
            if hidden > 0:
                lines.append(f"- ... and {hidden} more files")
            lines.append("")
        return "\n".join(lines)

    def _neighborhoods(self) -> str:
        semantic = self.graph.metadata.configuration.get("semantic_neighborhoods")
        if semantic is None or not semantic.semantic_neighborhoods:
            return ""
        meta = semantic.analysis_metadata
        lines = [
            "## 🧩 Semantic Neighborhoods",
            "",
            f"{meta.total_neighborhoods} groups of files that changed together in the last "
            f"{meta.analysis_period_days} days ({meta.total_clusters} clusters).",
            "",
        ]
        for neighborhood in semantic.semantic_neighborhoods[:MAX_NEIGHBORHOODS]:
            files = ", ".join(f"`{f}`" for f in neighborhood.files)
            lines.append(f"- **{neighborhood.name}** (correlation {neighborhood.correlation_strength:.2f}): {files}")
        lines.append("")
        return "\n".join(lines)


def _top_symbols(symbols: list[Symbol]) -> list[Symbol]:
    """Classes and framework symbols first, then in source order."""
    ranked = sorted(
        symbols,
        key=lambda s: (
            s.framework_type is None,
            s.kind.value not in ("class", "interface", "struct", "trait"),
            s.location.start_line,
        ),
    )
    return ranked[:MAX_SYMBOLS_PER_FILE]


def render_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d")
