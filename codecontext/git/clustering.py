"""
Hierarchical Clustering

Ward agglomerative clustering over small dense feature vectors, with the
quality metrics used to choose and describe the clusters.
"""

from typing import Optional, Sequence

import numpy as np
from scipy.cluster.hierarchy import fcluster, linkage
from scipy.spatial.distance import cdist, pdist, squareform

from codecontext.configs.logging import get_logger

logger = get_logger("git.clustering")

Vectors = Sequence[Sequence[float]]


def as_matrix(vectors: Vectors) -> np.ndarray:
    matrix = np.asarray(vectors, dtype=float)
    if matrix.size == 0:
        return matrix.reshape(len(vectors), 0)
    return matrix.reshape(len(vectors), -1)


def ward_linkage(vectors: Vectors) -> np.ndarray:
    """
    Full Ward merge tree in SciPy linkage-matrix form.

    Row ``m`` is ``[left, right, distance, size]``; points are ``0..n-1``
    and the cluster created by row ``m`` gets id ``n + m``.
    """
    return linkage(as_matrix(vectors), method="ward")


def cut_tree(merges: np.ndarray, k: int) -> list[int]:
    """Labels after cutting the tree into at most ``k`` clusters, numbered in point order."""
    raw = fcluster(merges, t=k, criterion="maxclust")
    labels: dict[int, int] = {}
    return [labels.setdefault(int(label), len(labels)) for label in raw]


def silhouette_samples(vectors: Vectors, labels: list[int]) -> list[float]:
    """Per-point silhouette; points in singleton clusters score 0."""
    matrix = as_matrix(vectors)
    tags = np.asarray(labels)
    clusters = set(labels)
    if len(clusters) < 2:
        return [0.0] * len(labels)

    distances = squareform(pdist(matrix))
    scores = []
    for i, label in enumerate(labels):
        same = tags == label
        same[i] = False
        if not same.any():
            scores.append(0.0)
            continue
        a = distances[i, same].mean()
        b = min(distances[i, tags == other].mean() for other in clusters - {label})
        denominator = max(a, b)
        scores.append(float((b - a) / denominator) if denominator > 0 else 0.0)
    return scores


def cluster_centers(vectors: Vectors, labels: list[int]) -> dict[int, np.ndarray]:
    matrix = as_matrix(vectors)
    tags = np.asarray(labels)
    return {label: matrix[tags == label].mean(axis=0) for label in dict.fromkeys(labels)}


def davies_bouldin_scores(vectors: Vectors, labels: list[int]) -> dict[int, float]:
    """Per-cluster Davies-Bouldin ratio (worst similarity to any other cluster)."""
    matrix = as_matrix(vectors)
    tags = np.asarray(labels)
    centers = cluster_centers(matrix, labels)
    scatter = {
        label: float(cdist(matrix[tags == label], center[np.newaxis, :]).mean())
        for label, center in centers.items()
    }

    scores = {}
    for label, center in centers.items():
        worst = 0.0
        for other, other_center in centers.items():
            if other == label:
                continue
            separation = float(np.linalg.norm(center - other_center))
            if separation > 0:
                worst = max(worst, (scatter[label] + scatter[other]) / separation)
        scores[label] = worst
    return scores


class HierarchicalClusterer:
    """
    Ward clustering that picks its own cluster count.

    The count is the k in [2, n-1] with the highest mean silhouette (ties go
    to the smaller k). With two or fewer points every point is its own
    cluster.
    """

    def __init__(self, max_clusters: Optional[int] = None):
        self.max_clusters = max_clusters

    def fit(self, vectors: Vectors) -> list[int]:
        n = len(vectors)
        if n <= 2:
            return list(range(n))

        merges = ward_linkage(vectors)
        upper = n - 1
        if self.max_clusters:
            upper = max(2, min(upper, self.max_clusters))

        best_labels = cut_tree(merges, 2)
        best_score = -np.inf
        for k in range(2, upper + 1):
            labels = cut_tree(merges, k)
            score = float(np.mean(silhouette_samples(vectors, labels)))
            if score > best_score + 1e-12:
                best_score, best_labels = score, labels
        logger.debug(f"Clustered {n} points into {len(set(best_labels))} clusters (silhouette {best_score:.3f})")
        return best_labels
