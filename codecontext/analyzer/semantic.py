"""
Semantic Neighborhood Analysis

Runs the git co-change pipeline for a target directory and packages the
result for graph metadata. Every step may fail on its own; the result then
carries what was computed so far plus an error message, and nothing is
raised to the builder.
"""

import time
from dataclasses import dataclass, field
from typing import Optional

from codecontext.configs.logging import get_logger
from codecontext.exceptions import CodeContextError
from codecontext.git.history import GitAnalyzer
from codecontext.git.integration import ClusteredNeighborhood, EnhancedNeighborhood, GraphIntegration
from codecontext.git.neighborhoods import SemanticAnalyzer, SemanticConfig, SemanticNeighborhood
from codecontext.graph.store import CodeGraph

logger = get_logger("analyzer.semantic")

RATING_THRESHOLDS = (
    (0.7, "Excellent"),
    (0.5, "Good"),
    (0.25, "Fair"),
)


@dataclass
class QualityScores:
    average_silhouette_score: float = 0.0
    average_davies_bouldin_index: float = 0.0
    overall_quality_rating: str = ""


@dataclass
class SemanticAnalysisMetadata:
    is_git_repository: bool = False
    analysis_period_days: int = 0
    total_neighborhoods: int = 0
    total_clusters: int = 0
    files_with_patterns: int = 0
    average_cluster_size: float = 0.0
    analysis_time: float = 0.0
    quality_scores: QualityScores = field(default_factory=QualityScores)


@dataclass
class SemanticAnalysisResult:
    semantic_neighborhoods: list[SemanticNeighborhood] = field(default_factory=list)
    enhanced_neighborhoods: list[EnhancedNeighborhood] = field(default_factory=list)
    clustered_neighborhoods: list[ClusteredNeighborhood] = field(default_factory=list)
    analysis_metadata: SemanticAnalysisMetadata = field(default_factory=SemanticAnalysisMetadata)
    error: str = ""


def build_semantic_neighborhoods(
    target_dir: str,
    graph: CodeGraph,
    config: Optional[SemanticConfig] = None,
) -> SemanticAnalysisResult:
    """
    Analyze git co-change patterns for ``target_dir`` against ``graph``.

    A non-git directory gives ``is_git_repository=False`` without an error.
    """
    start = time.monotonic()
    config = config or SemanticConfig()
    result = SemanticAnalysisResult()
    meta = result.analysis_metadata

    def finish(error: str = "") -> SemanticAnalysisResult:
        result.error = error
        meta.analysis_time = time.monotonic() - start
        if error:
            logger.warning(f"Semantic analysis incomplete: {error}")
        return result

    try:
        git_analyzer = GitAnalyzer(target_dir)
    except CodeContextError as e:
        return finish(f"Failed to create git analyzer: {e}")

    if not git_analyzer.is_git_repository():
        logger.info(f"Not a git repository, skipping semantic analysis: {target_dir}")
        return finish()
    meta.is_git_repository = True

    try:
        semantic_analyzer = SemanticAnalyzer(target_dir, config)
    except CodeContextError as e:
        return finish(f"Failed to create semantic analyzer: {e}")

    try:
        analysis = semantic_analyzer.analyze_repository()
    except CodeContextError as e:
        return finish(f"Failed to analyze repository: {e}")

    result.semantic_neighborhoods = analysis.neighborhoods
    meta.analysis_period_days = config.analysis_period_days
    meta.total_neighborhoods = len(analysis.neighborhoods)
    meta.files_with_patterns = len({f for n in analysis.neighborhoods for f in n.files})

    integration = GraphIntegration(graph, target_dir)
    try:
        result.enhanced_neighborhoods = integration.build_enhanced_neighborhoods(analysis.neighborhoods)
    except CodeContextError as e:
        return finish(f"Failed to build enhanced neighborhoods: {e}")

    try:
        result.clustered_neighborhoods = integration.build_clustered_neighborhoods(result.enhanced_neighborhoods)
    except CodeContextError as e:
        return finish(f"Failed to build clustered neighborhoods: {e}")

    clusters = result.clustered_neighborhoods
    meta.total_clusters = len(clusters)
    if clusters:
        meta.average_cluster_size = sum(c.cluster.size for c in clusters) / len(clusters)
    meta.quality_scores = calculate_quality_scores(clusters)
    return finish()


def calculate_quality_scores(clusters: list[ClusteredNeighborhood]) -> QualityScores:
    """Average silhouette and Davies-Bouldin over clusters with a positive silhouette."""
    if not clusters:
        return QualityScores(overall_quality_rating="No clusters")

    valid = [c.quality_metrics for c in clusters if c.quality_metrics.silhouette_score > 0]
    if not valid:
        return QualityScores(overall_quality_rating="Insufficient data")

    silhouette = sum(q.silhouette_score for q in valid) / len(valid)
    davies_bouldin = sum(q.davies_bouldin_index for q in valid) / len(valid)
    return QualityScores(
        average_silhouette_score=silhouette,
        average_davies_bouldin_index=davies_bouldin,
        overall_quality_rating=quality_rating(silhouette),
    )


def quality_rating(silhouette: float) -> str:
    for threshold, rating in RATING_THRESHOLDS:
        if silhouette >= threshold:
            return rating
    return "Poor"
