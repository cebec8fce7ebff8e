"""
Tests for the semantic neighborhood pipeline

Runs git co-change mining, graph integration, and clustering against real
temporary repositories.
"""

import pytest

from codecontext.analyzer.builder import GraphBuilder
from codecontext.analyzer.semantic import build_semantic_neighborhoods, calculate_quality_scores, quality_rating
from codecontext.git.clustering import HierarchicalClusterer
from codecontext.git.integration import (
    ClusteredNeighborhood,
    ClusterIntraMetrics,
    ClusterQualityMetrics,
    NeighborhoodCluster,
    dominant_directory,
    feature_vectors,
    optimal_tasks,
)
from codecontext.graph.store import CodeGraph

from conftest import commit_files


def cluster_with(silhouette: float, davies_bouldin: float = 0.5) -> ClusteredNeighborhood:
    return ClusteredNeighborhood(
        cluster=NeighborhoodCluster(
            id=1, name="src cluster", description="", size=2, strength=0.5, intra_metrics=ClusterIntraMetrics()
        ),
        neighborhoods=[],
        quality_metrics=ClusterQualityMetrics(silhouette_score=silhouette, davies_bouldin_index=davies_bouldin),
    )


@pytest.fixture
def co_change_repo(temp_git_repo):
    """Repository with two groups of files that always change together."""
    for i in range(3):
        commit_files(temp_git_repo, {
            "src/a.ts": f"import {{ b }} from './b';\nexport const a = {i};\n",
            "src/b.ts": f"export const b = {i};\n",
        }, f"Update src {i}")
    for i in range(2):
        commit_files(temp_git_repo, {
            "lib/x.py": f"X = {i}\n",
            "lib/y.py": f"Y = {i}\n",
        }, f"Update lib {i}")
    return temp_git_repo


class TestQualityRating:
    """Test silhouette rating thresholds."""

    @pytest.mark.parametrize("score,rating", [
        (0.9, "Excellent"),
        (0.7, "Excellent"),
        (0.69, "Good"),
        (0.5, "Good"),
        (0.3, "Fair"),
        (0.25, "Fair"),
        (0.2499, "Poor"),
        (-0.5, "Poor"),
    ])
    def test_thresholds(self, score, rating):
        assert quality_rating(score) == rating


class TestCalculateQualityScores:
    """Test aggregate cluster quality."""

    def test_no_clusters(self):
        assert calculate_quality_scores([]).overall_quality_rating == "No clusters"

    def test_no_positive_silhouettes(self):
        scores = calculate_quality_scores([cluster_with(0.0), cluster_with(-0.2)])
        assert scores.overall_quality_rating == "Insufficient data"
        assert scores.average_silhouette_score == 0.0

    def test_averages_positive_clusters_only(self):
        scores = calculate_quality_scores([cluster_with(0.8, 0.2), cluster_with(0.6, 0.4), cluster_with(-0.1, 9.0)])
        assert scores.average_silhouette_score == pytest.approx(0.7)
        assert scores.average_davies_bouldin_index == pytest.approx(0.3)
        assert scores.overall_quality_rating == "Excellent"


class TestIntegrationHelpers:
    """Test cluster naming and feature helpers."""

    def test_dominant_directory(self):
        assert dominant_directory(["src/a.ts", "src/b.ts", "lib/c.ts"]) == "src"
        assert dominant_directory(["a.ts", "b.ts"]) == "root"
        assert dominant_directory(["lib/a.ts", "src/b.ts"]) == "lib"

    def test_optimal_tasks(self):
        tasks = optimal_tasks(["src/a.ts", "src/a.test.ts", "config.json", "README.md"], 0.8, "src")
        assert tasks == [
            "Refactoring tightly coupled files together",
            "Feature development in src",
            "Updating tests alongside implementation changes",
            "Configuration changes",
            "Documentation updates",
            "Bug fixes spanning related files",
        ]

    def test_feature_vectors_share_vocabulary(self, co_change_repo):
        graph = GraphBuilder().analyze(str(co_change_repo))
        enhanced = graph.metadata.configuration["semantic_neighborhoods"].enhanced_neighborhoods
        vectors = feature_vectors(enhanced)
        assert len(vectors) == len(enhanced)
        assert len({len(v) for v in vectors}) == 1


class TestBuildSemanticNeighborhoods:
    """Test the full pipeline."""

    def test_non_git_directory(self, temp_dir):
        result = build_semantic_neighborhoods(str(temp_dir), CodeGraph(str(temp_dir)))
        assert not result.analysis_metadata.is_git_repository
        assert result.error == ""
        assert result.semantic_neighborhoods == []

    def test_missing_directory_reports_error(self, temp_dir):
        missing = str(temp_dir / "missing")
        result = build_semantic_neighborhoods(missing, CodeGraph(missing))
        assert result.error.startswith("Failed to create git analyzer")
        assert not result.analysis_metadata.is_git_repository

    def test_repository_without_patterns(self, temp_git_repo):
        graph = GraphBuilder().analyze(str(temp_git_repo))
        result = graph.metadata.configuration["semantic_neighborhoods"]
        assert result.analysis_metadata.is_git_repository
        assert result.error == ""
        assert result.semantic_neighborhoods == []
        assert result.analysis_metadata.quality_scores.overall_quality_rating == "No clusters"

    def test_co_change_groups(self, co_change_repo):
        graph = GraphBuilder().analyze(str(co_change_repo))
        result = graph.metadata.configuration["semantic_neighborhoods"]
        meta = result.analysis_metadata

        assert result.error == ""
        assert meta.is_git_repository
        assert meta.analysis_period_days == 30
        assert meta.total_neighborhoods == 2
        assert meta.files_with_patterns == 4
        assert {n.name for n in result.semantic_neighborhoods} == {"src (a)", "lib (x)"}

        src = next(n for n in result.enhanced_neighborhoods if n.name == "src (a)")
        assert src.static_connections == 1
        assert src.static_density == 0.5
        assert src.combined_strength == pytest.approx(0.85)

        assert meta.total_clusters == 2
        assert [c.cluster.name for c in result.clustered_neighborhoods] == ["src cluster", "lib cluster"]
        assert [c.cluster.id for c in result.clustered_neighborhoods] == [1, 2]
        assert meta.average_cluster_size == 2.0
        # Singleton clusters carry no silhouette signal
        assert meta.quality_scores.overall_quality_rating == "Insufficient data"

    def test_clustering_failure_is_recorded(self, co_change_repo, monkeypatch):
        def fail(self, vectors):
            raise ValueError("linkage failed")

        monkeypatch.setattr(HierarchicalClusterer, "fit", fail)
        graph = GraphBuilder().analyze(str(co_change_repo))
        result = graph.metadata.configuration["semantic_neighborhoods"]
        assert result.error.startswith("Failed to build clustered neighborhoods: Clustering failed")
        assert len(result.enhanced_neighborhoods) == 2
        assert result.clustered_neighborhoods == []

    def test_recommendation_mentions_imports(self, co_change_repo):
        graph = GraphBuilder().analyze(str(co_change_repo))
        result = graph.metadata.configuration["semantic_neighborhoods"]
        src_cluster = result.clustered_neighborhoods[0].cluster
        assert src_cluster.recommendation_reason == (
            "Files changed together in 3 commits with average correlation 1.00 and share 1 import relationships"
        )
