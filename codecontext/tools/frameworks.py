"""
Framework Tools

Framework detection helpers and the ``get_framework_analysis`` tool.
"""

import threading
from collections import defaultdict
from typing import Optional

from codecontext.configs.logging import get_logger
from codecontext.graph.models import FrameworkType, Symbol
from codecontext.graph.store import CodeGraph
from codecontext.tools.common import refresh

logger = get_logger("tools.frameworks")

KEY_SYMBOL_LIMIT = 5

# Framework name -> (sub-types, path markers)
FRAMEWORK_MARKERS = {
    "react": ({"component", "hook"}, (".jsx", ".tsx")),
    "vue": ({"component", "computed", "watcher"}, (".vue",)),
    "angular": ({"component", "service", "directive"}, (".component.",)),
    "svelte": ({"component", "store", "action"}, (".svelte",)),
    "next.js": ({"route", "middleware"}, ("/pages/", "/app/")),
    "flutter": ({"widget", "state_class", "build_method"}, (".dart",)),
}
FRAMEWORK_ALIASES = {"nextjs": "next.js", "next": "next.js"}

# Sub-types counted by the framework report
ANALYZED_TYPES = {
    FrameworkType.COMPONENT,
    FrameworkType.HOOK,
    FrameworkType.DIRECTIVE,
    FrameworkType.SERVICE,
    FrameworkType.STORE,
    FrameworkType.COMPUTED,
    FrameworkType.WATCHER,
    FrameworkType.LIFECYCLE,
    FrameworkType.ROUTE,
    FrameworkType.MIDDLEWARE,
    FrameworkType.ACTION,
    FrameworkType.WIDGET,
    FrameworkType.STATE_CLASS,
    FrameworkType.BUILD_METHOD,
}

SYMBOL_TYPE_EMOJI = {
    "component": "🧩",
    "hook": "🪝",
    "directive": "📋",
    "service": "⚙️",
    "store": "🗄️",
    "computed": "🧮",
    "watcher": "👁️",
    "lifecycle": "🔄",
    "route": "🛣️",
    "middleware": "🔀",
    "action": "⚡",
}

FRAMEWORK_DESCRIPTIONS = {
    "component": "A reusable UI component that encapsulates functionality and presentation.",
    "hook": "A React hook that provides stateful logic and side effects.",
    "service": "An Angular service that provides shared functionality and data.",
    "directive": "An Angular directive that extends HTML with custom behavior.",
    "store": "A state management store for centralized application state.",
    "computed": "A Vue computed property that derives data reactively.",
    "watcher": "A Vue watcher that observes data changes and reacts accordingly.",
    "route": "A Next.js route handler for page or API endpoint.",
    "middleware": "Next.js middleware that runs before request completion.",
    "action": "A Svelte action that adds behavior to DOM elements.",
    "lifecycle": "A framework lifecycle method that handles component state changes.",
    "widget": "A Flutter widget that describes part of the user interface.",
    "state_class": "A Flutter State class holding mutable state for a StatefulWidget.",
    "build_method": "A Flutter build method that returns the widget tree.",
}

SYMBOL_INSIGHTS = {
    "component": "Consider: Props interface, state management, performance optimization",
    "hook": "Consider: Dependencies array, cleanup functions, memoization",
    "service": "Consider: Dependency injection, singleton pattern, testing",
    "store": "Consider: State mutations, subscriptions, persistence",
    "widget": "Consider: const constructors, widget composition, rebuild scope",
}


def _marker_path(rel_path: str) -> str:
    # Leading slash so directory markers also match at the project root
    return "/" + rel_path.replace("\\", "/").lstrip("/")


def symbol_type_emoji(symbol_type: str) -> str:
    return SYMBOL_TYPE_EMOJI.get(symbol_type, "📦")


def framework_description(symbol: Symbol) -> str:
    if symbol.framework_type is None:
        return ""
    return FRAMEWORK_DESCRIPTIONS.get(symbol.framework_type.value, "")


def framework_insight(symbol: Symbol, rel_path: str) -> str:
    """One-line advice for a framework symbol, or empty. ``rel_path`` is relative to the analyzed root."""
    if symbol.framework_type is None:
        return ""
    kind = symbol.framework_type.value
    if kind == "route":
        if "/api/" in _marker_path(rel_path):
            return "API Route: Consider request validation, error handling, response types"
        return "Page Route: Consider SEO, data fetching, loading states"
    return SYMBOL_INSIGHTS.get(kind, "")


def matches_framework(symbol: Symbol, rel_path: str, framework: str) -> bool:
    """True if the symbol's sub-type or its file path belongs to ``framework``."""
    name = framework.lower()
    name = FRAMEWORK_ALIASES.get(name, name)
    markers = FRAMEWORK_MARKERS.get(name)
    if markers is None:
        return False
    types, path_markers = markers
    path = _marker_path(rel_path)
    if symbol.framework_type is not None and symbol.framework_type.value in types:
        return True
    return any(marker in path for marker in path_markers)


def get_framework_for_file(rel_path: str) -> str:
    """Framework implied by a path relative to the analyzed root, or empty."""
    path = _marker_path(rel_path)
    if ".vue" in path:
        return "Vue"
    if ".svelte" in path:
        return "Svelte"
    if ".astro" in path:
        return "Astro"
    if ".component." in path:
        return "Angular"
    if path.endswith(".dart"):
        return "Flutter"
    if ".jsx" in path or ".tsx" in path:
        return "React"
    if "/pages/" in path or "/app/" in path:
        return "Next.js"
    return ""


def framework_insights(framework: str, counts: dict[str, int]) -> str:
    """Qualitative observations from a framework's sub-type histogram."""
    lines = []
    name = framework.lower()
    if name == "react":
        components, hooks = counts.get("component", 0), counts.get("hook", 0)
        if components and hooks:
            if hooks / components > 0.5:
                lines.append("✅ **Good hook usage**: High hook-to-component ratio suggests good state logic separation")
            else:
                lines.append("💡 **Consider more hooks**: Low hook-to-component ratio - consider extracting stateful logic")
        if components > 10:
            lines.append("📦 **Large codebase**: Consider component composition and code splitting")
    elif name == "vue":
        components, computed = counts.get("component", 0), counts.get("computed", 0)
        if computed:
            lines.append("✅ **Good reactive patterns**: Using computed properties for derived state")
        if components > computed * 2:
            lines.append("💡 **Consider computed properties**: Many components without computed properties")
    elif name == "angular":
        components, services = counts.get("component", 0), counts.get("service", 0)
        if services:
            if not components or services / components > 0.3:
                lines.append("✅ **Good service usage**: Good separation of concerns with services")
            else:
                lines.append("💡 **Consider more services**: Extract business logic into services")
    elif name == "svelte":
        components, stores = counts.get("component", 0), counts.get("store", 0)
        if stores:
            lines.append("✅ **Using stores**: Good global state management with Svelte stores")
        if components > 5 and not stores:
            lines.append("💡 **Consider stores**: Large component count without stores - consider global state management")
    elif name == "next.js":
        if counts.get("middleware", 0):
            lines.append("✅ **Using middleware**: Good request processing patterns")
        if counts.get("route", 0) > 20:
            lines.append("📊 **Large application**: Consider route organization and lazy loading")
    elif name == "flutter":
        widgets, states = counts.get("widget", 0), counts.get("state_class", 0)
        if widgets and states / widgets > 0.5:
            lines.append("💡 **Many stateful widgets**: Consider lifting state into a state management solution")
        elif widgets:
            lines.append("✅ **Mostly stateless widgets**: State is kept to a small set of widgets")
    return "\n".join(lines) + "\n" if lines else ""


def collect_framework_symbols(
    graph: CodeGraph,
    framework: str = "",
) -> dict[str, list[tuple[Symbol, str]]]:
    """Framework name -> [(symbol, file path)] in walk order."""
    grouped: dict[str, list[tuple[Symbol, str]]] = defaultdict(list)
    for symbol, path in graph.iter_symbols():
        if symbol.framework_type not in ANALYZED_TYPES:
            continue
        detected = get_framework_for_file(graph.relative_path(path)) or "Unknown"
        if framework and detected.lower() != FRAMEWORK_ALIASES.get(framework.lower(), framework.lower()):
            continue
        grouped[detected].append((symbol, path))
    return grouped


def get_framework_analysis(
    framework: str = "",
    include_stats: bool = False,
    target_dir: str = "",
    cancel_event: Optional[threading.Event] = None,
) -> str:
    """
    Framework-specific report: symbol distribution, insights, and key symbols.

    Args:
        framework: Limit the report to one framework (React, Vue, Angular, Svelte, Next.js, Flutter)
        include_stats: Add a per-framework symbol count overview
        target_dir: Directory to analyze (default: configured target)
    """
    logger.info(f"get_framework_analysis: framework={framework!r}")
    graph = refresh(target_dir, cancel_event)
    grouped = collect_framework_symbols(graph, framework)

    lines = ["# 🚀 Framework Analysis Report", ""]
    if framework:
        lines += [f"**Focused Analysis for: {framework}**", ""]
    else:
        lines += ["**Comprehensive Multi-Framework Analysis**", ""]

    if not grouped:
        lines.append("❌ **No framework-specific symbols found**")
        lines.append(
            "This codebase doesn't appear to use any detected frameworks, "
            "or symbols haven't been properly extracted."
        )
        return "\n".join(lines) + "\n"

    frameworks = sorted(grouped, key=lambda name: (-len(grouped[name]), name))

    if include_stats:
        lines += ["## 📊 Framework Overview", ""]
        for name in frameworks:
            lines.append(f"- **{name}**: {len(grouped[name])} symbols")
        lines += ["", f"**Total Framework Symbols**: {sum(len(v) for v in grouped.values())}", ""]

    for name in frameworks:
        entries = grouped[name]
        counts: dict[str, int] = defaultdict(int)
        for symbol, _ in entries:
            counts[symbol.framework_type.value] += 1

        lines += [f"## 🎯 {name} Framework Analysis", "", "### Symbol Distribution", ""]
        for symbol_type, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])):
            lines.append(f"- {symbol_type_emoji(symbol_type)} **{symbol_type}**: {count}")
        lines.append("")

        insights = framework_insights(name, counts)
        if insights:
            lines += ["### 💡 Framework Insights", "", insights]

        lines += ["### 🔑 Key Symbols", ""]
        for symbol, path in entries[:KEY_SYMBOL_LIMIT]:
            kind = symbol.framework_type.value
            location = f"{graph.relative_path(path)}:{symbol.location.start_line}"
            lines.append(f"- {symbol_type_emoji(kind)} **{symbol.name}** (`{kind}`) - {location}")
        lines.append("")

    if len(grouped) > 1:
        lines += [
            "## 🔄 Multi-Framework Observations",
            "",
            "This codebase uses multiple frameworks. Consider:",
            "- **Consistency**: Ensure similar patterns across frameworks",
            "- **Separation**: Keep framework-specific code in separate modules",
            "- **Shared utilities**: Extract common logic to framework-agnostic utilities",
            "",
        ]
    return "\n".join(lines)
