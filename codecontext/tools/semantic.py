"""
Semantic Neighborhoods Tool

Formats the git co-change analysis attached to the graph by the builder.
"""

import os
import threading
from typing import Optional

from codecontext.analyzer.semantic import SemanticAnalysisResult
from codecontext.configs.logging import get_logger
from codecontext.graph.store import CodeGraph
from codecontext.render.markdown import render_timestamp
from codecontext.tools.common import refresh

logger = get_logger("tools.semantic")

NO_NEIGHBORHOOD_REASONS = [
    "- Insufficient git history (need commits in the analysis period)",
    "- Files are not frequently changed together",
    "- Correlation thresholds too high for current patterns",
    "- Repository has mostly independent file changes",
]


def get_semantic_neighborhoods(
    file_path: str = "",
    include_basic: bool = False,
    include_quality: bool = False,
    max_results: int = 0,
    target_dir: str = "",
    cancel_event: Optional[threading.Event] = None,
) -> str:
    """
    Files that change together in git history, grouped into clusters.

    Args:
        file_path: Show the neighborhoods and clusters containing this file
        include_basic: List the raw co-change neighborhoods
        include_quality: Add clustering quality metrics
        max_results: Cap on listed neighborhoods and clusters (0 = unlimited)
        target_dir: Directory to analyze (default: configured target)
    """
    graph = refresh(target_dir, cancel_event)
    result: Optional[SemanticAnalysisResult] = graph.metadata.configuration.get("semantic_neighborhoods")
    if result is None:
        result = SemanticAnalysisResult()
    return format_semantic_response(graph, result, file_path, include_basic, include_quality, max_results)


def format_semantic_response(
    graph: CodeGraph,
    result: SemanticAnalysisResult,
    file_path: str = "",
    include_basic: bool = False,
    include_quality: bool = False,
    max_results: int = 0,
) -> str:
    meta = result.analysis_metadata
    lines = ["# Semantic Code Neighborhoods Analysis", ""]

    if not meta.is_git_repository and not result.error:
        lines.append(
            "❌ **Not a Git Repository**: This directory is not a git repository. "
            "Semantic neighborhoods require git history for pattern analysis."
        )
        return "\n".join(lines) + "\n"

    if result.error:
        lines += [f"⚠️ **Analysis Error**: {result.error}", ""]

    lines += [
        "## 📊 Analysis Overview",
        "",
        "**Git-based pattern analysis with hierarchical clustering:**",
        f"- **Analysis Period**: {meta.analysis_period_days} days",
        f"- **Files with Patterns**: {meta.files_with_patterns} files",
        f"- **Basic Neighborhoods**: {meta.total_neighborhoods} groups",
        f"- **Clustered Groups**: {meta.total_clusters} clusters",
        f"- **Average Cluster Size**: {meta.average_cluster_size:.1f} files",
        f"- **Analysis Time**: {meta.analysis_time * 1000:.0f}ms",
        f"- **Clustering Quality**: {meta.quality_scores.overall_quality_rating or 'N/A'}",
        "",
    ]

    neighborhoods = _limit(result.semantic_neighborhoods, max_results)
    clusters = _limit(result.clustered_neighborhoods, max_results)

    if file_path:
        lines += _recommendations(graph, result, file_path)

    if include_basic and neighborhoods:
        lines += ["## 🔍 Basic Semantic Neighborhoods", ""]
        for neighborhood in neighborhoods:
            lines += [
                f"### {neighborhood.name}",
                f"- **Correlation**: {neighborhood.correlation_strength:.2f}",
                f"- **Changes**: {neighborhood.change_frequency}",
                f"- **Files**: {len(neighborhood.files)}",
            ]
            if neighborhood.last_changed is not None:
                lines.append(f"- **Last Changed**: {render_timestamp(neighborhood.last_changed)}")
            lines += ["", "**Files:**"]
            lines += [f"- `{f}`" for f in neighborhood.files]
            lines.append("")

    if clusters:
        lines += ["## 🎯 Clustered Neighborhoods", ""]
        for clustered in clusters:
            cluster = clustered.cluster
            lines += [
                f"### Cluster {cluster.id}: {cluster.name}",
                f"- **Description**: {cluster.description}",
                f"- **Size**: {cluster.size} files",
                f"- **Strength**: {cluster.strength:.3f}",
                f"- **Silhouette Score**: {clustered.quality_metrics.silhouette_score:.3f}",
                f"- **Cohesion**: {cluster.intra_metrics.cohesion:.3f}",
                "",
            ]
            if cluster.optimal_tasks:
                lines.append("**Recommended Tasks:**")
                lines += [f"- {task}" for task in cluster.optimal_tasks]
                lines.append("")
            if cluster.recommendation_reason:
                lines += [f"**Why**: {cluster.recommendation_reason}", ""]

    if include_quality and clusters:
        quality = meta.quality_scores
        lines += [
            "## 📈 Quality Metrics",
            "",
            "**Overall Clustering Performance:**",
            f"- **Average Silhouette Score**: {quality.average_silhouette_score:.3f}",
            f"- **Average Davies-Bouldin Index**: {quality.average_davies_bouldin_index:.3f}",
            f"- **Quality Rating**: {quality.overall_quality_rating}",
            "",
            "**Interpretation:**",
            "- Silhouette Score: ≥0.7 Excellent, ≥0.5 Good, ≥0.25 Fair, <0.25 Poor",
            "- Davies-Bouldin Index: Lower values indicate better clustering",
            "- Clustering uses Ward linkage for optimal cluster cohesion",
            "",
        ]

    if not result.semantic_neighborhoods:
        lines += ["## 🏷️ No Neighborhoods Found", "", "No semantic neighborhoods were found. This could mean:"]
        lines += NO_NEIGHBORHOOD_REASONS
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def _limit(items: list, max_results: int) -> list:
    if max_results and max_results > 0:
        return items[:max_results]
    return items


def _relative_file(graph: CodeGraph, file_path: str) -> str:
    path = file_path.replace("\\", "/")
    if os.path.isabs(path):
        return graph.relative_path(os.path.normpath(path))
    return os.path.normpath(path).replace(os.sep, "/")


def _recommendations(graph: CodeGraph, result: SemanticAnalysisResult, file_path: str) -> list[str]:
    target = _relative_file(graph, file_path)
    related = [n for n in result.semantic_neighborhoods if target in n.files]
    related_clusters = [c for c in result.clustered_neighborhoods if target in c.files]

    lines = [f"## 🎯 Context Recommendations for `{target}`", ""]
    if not related and not related_clusters:
        lines += [
            "**No direct relationships found.** This file may be independent or have weak patterns with other files.",
            "",
        ]
        return lines

    if related:
        lines.append("**Related Neighborhoods:**")
        for neighborhood in related:
            others = [f for f in neighborhood.files if f != target]
            lines.append(
                f"- **{neighborhood.name}** (correlation {neighborhood.correlation_strength:.2f}): "
                + ", ".join(f"`{f}`" for f in others)
            )
        lines.append("")
    if related_clusters:
        lines.append("**Related Clusters:**")
        for clustered in related_clusters:
            lines.append(f"- Cluster {clustered.cluster.id}: {clustered.cluster.name}")
        lines.append("")
    return lines
