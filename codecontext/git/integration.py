"""
Graph Integration

Joins git co-change neighborhoods with the static import graph and groups
the result into clusters of related neighborhoods.
"""

import os
import posixpath
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from scipy.spatial.distance import pdist

from codecontext.ast.parser import is_test_file
from codecontext.configs.logging import get_logger
from codecontext.exceptions import SemanticAnalysisError
from codecontext.git.clustering import (
    HierarchicalClusterer,
    as_matrix,
    cluster_centers,
    davies_bouldin_scores,
    silhouette_samples,
)
from codecontext.git.neighborhoods import SemanticNeighborhood
from codecontext.graph.models import EdgeType
from codecontext.graph.store import CodeGraph, path_from_node_id

logger = get_logger("git.integration")

CONFIG_EXTENSIONS = (".json", ".yaml", ".yml", ".toml", ".ini", ".env")
DOC_EXTENSIONS = (".md", ".rst", ".txt")


@dataclass
class IntegrationConfig:
    git_weight: float = 0.7
    static_weight: float = 0.3
    max_related_files: int = 5
    max_clusters: int = 10


@dataclass
class EnhancedNeighborhood:
    """A co-change neighborhood joined with the static graph."""

    neighborhood: SemanticNeighborhood
    static_connections: int = 0
    static_density: float = 0.0
    related_files: list[str] = field(default_factory=list)
    combined_strength: float = 0.0

    @property
    def name(self) -> str:
        return self.neighborhood.name

    @property
    def files(self) -> list[str]:
        return self.neighborhood.files


@dataclass
class ClusterIntraMetrics:
    cohesion: float = 0.0
    separation: float = 0.0
    density: float = 0.0
    diameter: float = 0.0


@dataclass
class ClusterQualityMetrics:
    silhouette_score: float = 0.0
    davies_bouldin_index: float = 0.0


@dataclass
class NeighborhoodCluster:
    id: int
    name: str
    description: str
    size: int
    strength: float
    intra_metrics: ClusterIntraMetrics
    optimal_tasks: list[str] = field(default_factory=list)
    recommendation_reason: str = ""


@dataclass
class ClusteredNeighborhood:
    cluster: NeighborhoodCluster
    neighborhoods: list[EnhancedNeighborhood]
    quality_metrics: ClusterQualityMetrics

    @property
    def files(self) -> list[str]:
        return sorted({f for n in self.neighborhoods for f in n.files})


class GraphIntegration:
    """
    Combines git neighborhoods with the code graph.

    Neighborhood file paths are relative to ``repo_path`` with forward
    slashes; graph keys are the normalized absolute paths.
    """

    def __init__(self, graph: CodeGraph, repo_path: str, config: Optional[IntegrationConfig] = None):
        self.graph = graph
        self.repo_path = os.path.abspath(repo_path)
        self.config = config or IntegrationConfig()
        self._imports: dict[str, set[str]] = defaultdict(set)
        self._neighbors: dict[str, set[str]] = defaultdict(set)
        for edge in graph.iter_edges(EdgeType.IMPORTS):
            source = self._relative(path_from_node_id(edge.source))
            target = self._relative(path_from_node_id(edge.target))
            self._imports[source].add(target)
            self._neighbors[source].add(target)
            self._neighbors[target].add(source)

    def _relative(self, path: str) -> str:
        return os.path.relpath(path, self.repo_path).replace(os.sep, "/")

    def build_enhanced_neighborhoods(self, neighborhoods: list[SemanticNeighborhood]) -> list[EnhancedNeighborhood]:
        enhanced = []
        for neighborhood in neighborhoods:
            members = set(neighborhood.files)
            connections = sum(
                1 for path in members for target in self._imports.get(path, ()) if target in members
            )
            possible = len(members) * (len(members) - 1)
            density = min(1.0, connections / possible) if possible else 0.0

            related: Counter = Counter()
            for path in neighborhood.files:
                for other in self._neighbors.get(path, ()):
                    if other not in members:
                        related[other] += 1
            related_files = [
                path for path, _ in sorted(related.items(), key=lambda kv: (-kv[1], kv[0]))
            ][: self.config.max_related_files]

            combined = (
                self.config.git_weight * neighborhood.correlation_strength
                + self.config.static_weight * density
            )
            enhanced.append(EnhancedNeighborhood(
                neighborhood=neighborhood,
                static_connections=connections,
                static_density=round(density, 4),
                related_files=related_files,
                combined_strength=round(combined, 4),
            ))
        return enhanced

    def build_clustered_neighborhoods(self, enhanced: list[EnhancedNeighborhood]) -> list[ClusteredNeighborhood]:
        if not enhanced:
            return []

        vectors = as_matrix(feature_vectors(enhanced))
        try:
            labels = HierarchicalClusterer(self.config.max_clusters).fit(vectors)
            silhouettes = silhouette_samples(vectors, labels)
            davies_bouldin = davies_bouldin_scores(vectors, labels)
        except (ValueError, FloatingPointError) as e:
            raise SemanticAnalysisError("Clustering failed", {"neighborhoods": len(enhanced), "error": str(e)})

        groups: dict[int, list[int]] = {}
        for index, label in enumerate(labels):
            groups.setdefault(label, []).append(index)
        centers = cluster_centers(vectors, labels)

        clustered = []
        used_names: Counter = Counter()
        for label, indexes in groups.items():
            members = [enhanced[i] for i in indexes]
            files = sorted({f for n in members for f in n.files})
            directory = dominant_directory(files)
            used_names[directory] += 1
            name = f"{directory} cluster"
            if used_names[directory] > 1:
                name += f" #{used_names[directory]}"

            strength = sum(n.combined_strength for n in members) / len(members)
            distances = [float(d) for d in pdist(vectors[indexes])]
            other_centers = [c for other, c in centers.items() if other != label]
            intra = ClusterIntraMetrics(
                cohesion=round(1.0 / (1.0 + sum(distances) / len(distances)) if distances else 1.0, 4),
                separation=round(min((float(np.linalg.norm(centers[label] - c)) for c in other_centers), default=0.0), 4),
                density=round(sum(n.neighborhood.correlation_strength for n in members) / len(members), 4),
                diameter=round(max(distances, default=0.0), 4),
            )
            quality = ClusterQualityMetrics(
                silhouette_score=round(sum(silhouettes[i] for i in indexes) / len(indexes), 4),
                davies_bouldin_index=round(davies_bouldin[label], 4),
            )
            clustered.append(ClusteredNeighborhood(
                cluster=NeighborhoodCluster(
                    id=len(clustered) + 1,
                    name=name,
                    description=(
                        f"{len(members)} neighborhood{'s' if len(members) != 1 else ''} "
                        f"covering {len(files)} files, mostly in {directory}"
                    ),
                    size=len(files),
                    strength=round(strength, 4),
                    intra_metrics=intra,
                    optimal_tasks=optimal_tasks(files, strength, directory),
                    recommendation_reason=recommendation_reason(members),
                ),
                neighborhoods=members,
                quality_metrics=quality,
            ))

        clustered.sort(key=lambda c: (-c.cluster.strength, c.cluster.name))
        for position, item in enumerate(clustered, start=1):
            item.cluster.id = position
        logger.debug(f"Built {len(clustered)} clusters from {len(enhanced)} neighborhoods")
        return clustered


def feature_vectors(enhanced: list[EnhancedNeighborhood]) -> list[list[float]]:
    """Member files weigh 1.0; their directories and related files weigh 0.5."""
    features: list[dict[str, float]] = []
    for item in enhanced:
        weights: dict[str, float] = {}
        for path in item.files:
            weights[f"dir:{posixpath.dirname(path)}"] = 0.5
        for path in item.related_files:
            weights[f"file:{path}"] = 0.5
        for path in item.files:
            weights[f"file:{path}"] = 1.0
        features.append(weights)

    vocabulary = sorted({key for weights in features for key in weights})
    return [[weights.get(key, 0.0) for key in vocabulary] for weights in features]


def dominant_directory(files: list[str]) -> str:
    counts = Counter(posixpath.dirname(f) or "root" for f in files)
    directory, _ = min(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return directory


def optimal_tasks(files: list[str], strength: float, directory: str) -> list[str]:
    tasks = []
    if strength >= 0.7:
        tasks.append("Refactoring tightly coupled files together")
    tasks.append(f"Feature development in {directory}")
    if any(is_test_file(f) for f in files):
        tasks.append("Updating tests alongside implementation changes")
    if any(f.endswith(CONFIG_EXTENSIONS) for f in files):
        tasks.append("Configuration changes")
    if any(f.endswith(DOC_EXTENSIONS) for f in files):
        tasks.append("Documentation updates")
    tasks.append("Bug fixes spanning related files")
    return tasks


def recommendation_reason(members: list[EnhancedNeighborhood]) -> str:
    changes = sum(n.neighborhood.change_frequency for n in members)
    correlation = sum(n.neighborhood.correlation_strength for n in members) / len(members)
    reason = f"Files changed together in {changes} commits with average correlation {correlation:.2f}"
    connections = sum(n.static_connections for n in members)
    if connections:
        reason += f" and share {connections} import relationships"
    return reason
