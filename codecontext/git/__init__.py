"""
Git Analysis

History mining, co-change neighborhoods, and neighborhood clustering.
"""

from codecontext.git.clustering import HierarchicalClusterer
from codecontext.git.history import CommitInfo, GitAnalyzer
from codecontext.git.integration import (
    ClusteredNeighborhood,
    EnhancedNeighborhood,
    GraphIntegration,
    IntegrationConfig,
)
from codecontext.git.neighborhoods import SemanticAnalyzer, SemanticConfig, SemanticNeighborhood

__all__ = [
    "ClusteredNeighborhood",
    "CommitInfo",
    "EnhancedNeighborhood",
    "GitAnalyzer",
    "GraphIntegration",
    "HierarchicalClusterer",
    "IntegrationConfig",
    "SemanticAnalyzer",
    "SemanticConfig",
    "SemanticNeighborhood",
]
