"""
Semantic Neighborhoods

Mines git history for files that change together and groups them into
neighborhoods.

Correlation between two files is the Jaccard ratio of the commits that
touch them: ``co_changes / (freq_a + freq_b - co_changes)``.
"""

import os
import posixpath
from collections import Counter, defaultdict
from dataclasses import asdict, dataclass, field
from datetime import datetime
from itertools import combinations
from pathlib import PurePosixPath
from typing import Optional

from codecontext.configs.logging import get_logger
from codecontext.exceptions import GitUnavailableError
from codecontext.git.history import CommitInfo, GitAnalyzer

logger = get_logger("git.neighborhoods")


@dataclass
class SemanticConfig:
    """Tuning for co-change mining."""

    analysis_period_days: int = 30
    min_change_frequency: int = 2
    min_correlation: float = 0.3
    max_neighborhood_size: int = 10
    max_files_per_commit: int = 50  # Larger commits (bulk renames, reformatting) are ignored


@dataclass
class SemanticNeighborhood:
    """Files that frequently change together."""

    name: str
    files: list[str]
    correlation_strength: float
    change_frequency: int
    last_changed: Optional[datetime] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["last_changed"] = self.last_changed.isoformat() if self.last_changed else None
        return data


@dataclass
class AnalysisSummary:
    total_commits: int = 0
    analyzed_commits: int = 0
    active_files: int = 0
    neighborhoods_found: int = 0
    analysis_period_days: int = 30


@dataclass
class RepositoryAnalysis:
    neighborhoods: list[SemanticNeighborhood] = field(default_factory=list)
    change_frequency: dict[str, int] = field(default_factory=dict)
    correlations: dict[tuple[str, str], float] = field(default_factory=dict)
    summary: AnalysisSummary = field(default_factory=AnalysisSummary)


class SemanticAnalyzer:
    """Co-change analysis over one git working tree."""

    def __init__(self, repo_path: str, config: Optional[SemanticConfig] = None):
        self.config = config or SemanticConfig()
        self.git = GitAnalyzer(repo_path)
        if not self.git.is_git_repository():
            raise GitUnavailableError(f"Not a git repository: {repo_path}")
        self.repo_path = self.git.repo_path

    def analyze_repository(self) -> RepositoryAnalysis:
        """
        Read history for the configured window and build neighborhoods.

        Raises:
            GitCommandError: If git log fails
        """
        commits = self.git.get_commit_history(self.config.analysis_period_days)
        analysis = self.analyze_commits(commits)
        logger.info(
            f"Semantic analysis: {analysis.summary.analyzed_commits}/{analysis.summary.total_commits} commits, "
            f"{analysis.summary.neighborhoods_found} neighborhoods"
        )
        return analysis

    def analyze_commits(self, commits: list[CommitInfo]) -> RepositoryAnalysis:
        cfg = self.config
        frequency: Counter = Counter()
        pair_counts: Counter = Counter()
        touched_by: dict[str, list[CommitInfo]] = defaultdict(list)
        analyzed = 0

        for commit in commits:
            files = sorted({f for f in commit.files if self._exists(f)})
            if not files or len(files) > cfg.max_files_per_commit:
                continue
            analyzed += 1
            for path in files:
                frequency[path] += 1
                touched_by[path].append(commit)
            for a, b in combinations(files, 2):
                pair_counts[(a, b)] += 1

        correlations: dict[tuple[str, str], float] = {}
        partners: dict[str, list[tuple[float, str]]] = defaultdict(list)
        for (a, b), together in pair_counts.items():
            if frequency[a] < cfg.min_change_frequency or frequency[b] < cfg.min_change_frequency:
                continue
            correlation = together / (frequency[a] + frequency[b] - together)
            if correlation < cfg.min_correlation:
                continue
            correlations[(a, b)] = correlation
            partners[a].append((correlation, b))
            partners[b].append((correlation, a))

        neighborhoods = self._group(frequency, partners, correlations, touched_by)
        return RepositoryAnalysis(
            neighborhoods=neighborhoods,
            change_frequency=dict(frequency),
            correlations=correlations,
            summary=AnalysisSummary(
                total_commits=len(commits),
                analyzed_commits=analyzed,
                active_files=len(frequency),
                neighborhoods_found=len(neighborhoods),
                analysis_period_days=cfg.analysis_period_days,
            ),
        )

    def _group(
        self,
        frequency: Counter,
        partners: dict[str, list[tuple[float, str]]],
        correlations: dict[tuple[str, str], float],
        touched_by: dict[str, list[CommitInfo]],
    ) -> list[SemanticNeighborhood]:
        """Greedy, disjoint grouping seeded by the most frequently changed files."""
        assigned: set[str] = set()
        neighborhoods = []

        for seed in sorted(partners, key=lambda f: (-frequency[f], f)):
            if seed in assigned:
                continue
            members = [seed]
            for _, other in sorted(partners[seed], key=lambda p: (-p[0], p[1])):
                if len(members) >= self.config.max_neighborhood_size:
                    break
                if other not in assigned:
                    members.append(other)
            if len(members) < 2:
                continue
            assigned.update(members)

            pair_values = [correlations.get(tuple(sorted(pair)), 0.0) for pair in combinations(members, 2)]
            commits = {c.hash: c for path in members for c in touched_by[path]}
            neighborhoods.append(SemanticNeighborhood(
                name=neighborhood_name(members),
                files=sorted(members),
                correlation_strength=round(sum(pair_values) / len(pair_values), 4),
                change_frequency=len(commits),
                last_changed=max((c.timestamp for c in commits.values()), default=None),
            ))

        neighborhoods.sort(key=lambda n: (-n.correlation_strength, n.name))
        return neighborhoods

    def _exists(self, relative_path: str) -> bool:
        return os.path.isfile(os.path.join(self.repo_path, relative_path))


def neighborhood_name(files: list[str]) -> str:
    """Common directory of the files plus the stem of the first one."""
    directories = [posixpath.dirname(f) for f in files]
    common = posixpath.commonpath(directories) if all(directories) else ""
    return f"{common or 'root'} ({PurePosixPath(files[0]).stem})"
