"""
Tests for git history mining and clustering

Covers log parsing, co-change neighborhoods, and the Ward clustering
helpers used to group neighborhoods.
"""

from datetime import datetime, timezone

import pytest

from codecontext.exceptions import GitUnavailableError
from codecontext.git.clustering import (
    HierarchicalClusterer,
    cut_tree,
    davies_bouldin_scores,
    silhouette_samples,
    ward_linkage,
)
from codecontext.git.history import COMMIT_MARKER, CommitInfo, GitAnalyzer, parse_git_log
from codecontext.git.neighborhoods import SemanticAnalyzer, SemanticConfig, neighborhood_name

from conftest import git, write_tree


def commit(hash_: str, files: list[str], day: int = 1) -> CommitInfo:
    return CommitInfo(
        hash=hash_,
        author="Test User",
        timestamp=datetime(2024, 1, day, tzinfo=timezone.utc),
        message=f"commit {hash_}",
        files=files,
    )


# =============================================================================
# Log parsing and repository access
# =============================================================================


class TestParseGitLog:
    """Test parsing of formatted git log output."""

    def test_commits_and_files(self):
        output = (
            f"{COMMIT_MARKER}abc123\x1fAlice\x1f1700000000\x1fFix bug\n"
            "src/a.ts\n"
            "src/b.ts\n"
            "\n"
            f"{COMMIT_MARKER}def456\x1fBob\x1f1700000100\x1fInitial"
        )
        commits = parse_git_log(output)
        assert [c.hash for c in commits] == ["abc123", "def456"]
        assert commits[0].author == "Alice"
        assert commits[0].message == "Fix bug"
        assert commits[0].files == ["src/a.ts", "src/b.ts"]
        assert commits[0].timestamp == datetime.fromtimestamp(1700000000, tz=timezone.utc)
        assert commits[1].files == []

    def test_malformed_entries_skipped(self):
        output = f"{COMMIT_MARKER}broken\n{COMMIT_MARKER}ok\x1fA\x1fnot-a-number\x1fmsg\n{COMMIT_MARKER}good\x1fA\x1f1\x1fmsg\n"
        assert [c.hash for c in parse_git_log(output)] == ["good"]

    def test_empty_output(self):
        assert parse_git_log("") == []


class TestGitAnalyzer:
    """Test repository detection and history reading."""

    def test_missing_directory(self, temp_dir):
        with pytest.raises(GitUnavailableError):
            GitAnalyzer(str(temp_dir / "missing"))

    def test_plain_directory_is_not_repository(self, temp_dir):
        assert not GitAnalyzer(str(temp_dir)).is_git_repository()

    def test_repository_detected(self, temp_git_repo):
        analyzer = GitAnalyzer(str(temp_git_repo))
        assert analyzer.is_git_repository()
        assert analyzer.repository_root() == str(temp_git_repo)

    def test_history(self, temp_git_repo):
        commits = GitAnalyzer(str(temp_git_repo)).get_commit_history(30)
        assert len(commits) == 1
        assert commits[0].message == "Initial commit"
        assert commits[0].files == ["README.md"]
        assert commits[0].author == "Test User"

    def test_empty_repository_has_no_history(self, temp_dir):
        git(temp_dir, "init")
        assert GitAnalyzer(str(temp_dir)).get_commit_history(30) == []


# =============================================================================
# Co-change neighborhoods
# =============================================================================


class TestSemanticAnalyzer:
    """Test co-change mining over synthetic commits."""

    @pytest.fixture
    def analyzer(self, temp_git_repo):
        write_tree(temp_git_repo, {
            "src/a.ts": "a",
            "src/b.ts": "b",
            "lib/c.ts": "c",
            "lib/d.ts": "d",
            "lib/e.ts": "e",
        })
        return SemanticAnalyzer(str(temp_git_repo))

    def test_requires_repository(self, temp_dir):
        with pytest.raises(GitUnavailableError):
            SemanticAnalyzer(str(temp_dir))

    def test_co_change_neighborhood(self, analyzer):
        analysis = analyzer.analyze_commits([
            commit("c1", ["src/a.ts", "src/b.ts"], day=1),
            commit("c2", ["src/a.ts", "src/b.ts"], day=2),
            commit("c3", ["src/a.ts", "lib/c.ts"], day=3),
        ])
        assert len(analysis.neighborhoods) == 1
        neighborhood = analysis.neighborhoods[0]
        assert neighborhood.files == ["src/a.ts", "src/b.ts"]
        assert neighborhood.name == "src (a)"
        assert neighborhood.correlation_strength == pytest.approx(2 / 3, abs=1e-4)
        assert neighborhood.change_frequency == 3
        assert neighborhood.last_changed == datetime(2024, 1, 3, tzinfo=timezone.utc)
        assert analysis.change_frequency == {"src/a.ts": 3, "src/b.ts": 2, "lib/c.ts": 1}

    def test_deleted_files_ignored(self, analyzer):
        analysis = analyzer.analyze_commits([
            commit("c1", ["src/a.ts", "src/b.ts"]),
            commit("c2", ["src/a.ts", "src/b.ts"]),
            commit("c3", ["gone/old.ts"]),
        ])
        assert analysis.summary.total_commits == 3
        assert analysis.summary.analyzed_commits == 2
        assert "gone/old.ts" not in analysis.change_frequency

    def test_large_commits_ignored(self, analyzer):
        analyzer.config = SemanticConfig(max_files_per_commit=2)
        analysis = analyzer.analyze_commits([
            commit("c1", ["lib/c.ts", "lib/d.ts", "lib/e.ts"]),
            commit("c2", ["lib/c.ts", "lib/d.ts", "lib/e.ts"]),
        ])
        assert analysis.summary.analyzed_commits == 0
        assert analysis.neighborhoods == []

    def test_weak_correlation_dropped(self, analyzer):
        analysis = analyzer.analyze_commits([
            commit("c1", ["lib/c.ts", "lib/d.ts"]),
            commit("c2", ["lib/c.ts"]),
            commit("c3", ["lib/c.ts"]),
            commit("c4", ["lib/c.ts"]),
            commit("c5", ["lib/d.ts"]),
        ])
        # 1 / (4 + 2 - 1) = 0.2
        assert analysis.correlations == {}
        assert analysis.neighborhoods == []

    def test_neighborhoods_are_disjoint(self, analyzer):
        commits = [commit(f"x{i}", ["lib/c.ts", "lib/d.ts", "lib/e.ts"]) for i in range(3)]
        commits += [commit(f"y{i}", ["src/a.ts", "src/b.ts"]) for i in range(2)]
        analysis = analyzer.analyze_commits(commits)
        seen = [f for n in analysis.neighborhoods for f in n.files]
        assert len(seen) == len(set(seen))
        assert {n.name for n in analysis.neighborhoods} == {"lib (c)", "src (a)"}

    def test_to_dict(self, analyzer):
        analysis = analyzer.analyze_commits([
            commit("c1", ["src/a.ts", "src/b.ts"], day=5),
            commit("c2", ["src/a.ts", "src/b.ts"], day=6),
        ])
        data = analysis.neighborhoods[0].to_dict()
        assert data["last_changed"] == "2024-01-06T00:00:00+00:00"
        assert data["files"] == ["src/a.ts", "src/b.ts"]


class TestNeighborhoodName:
    """Test neighborhood naming."""

    def test_common_directory(self):
        assert neighborhood_name(["src/ui/a.ts", "src/api/b.ts"]) == "src (a)"

    def test_root_files(self):
        assert neighborhood_name(["a.ts", "src/b.ts"]) == "root (a)"

    def test_same_directory(self):
        assert neighborhood_name(["pkg/models.py", "pkg/views.py"]) == "pkg (models)"


# =============================================================================
# Clustering
# =============================================================================


POINTS = [[0.0], [1.0], [10.0], [11.0]]


class TestWardLinkage:
    """Test the merge tree and cutting it."""

    def test_closest_pair_merges_first(self):
        merges = ward_linkage([[0.0], [1.0], [10.0]])
        left, right, distance, size = merges[0]
        assert (int(left), int(right)) == (0, 1)
        assert distance == pytest.approx(1.0)
        assert size == 2
        assert merges[1][3] == 3
        assert merges[1][2] > distance

    def test_merge_count(self):
        assert len(ward_linkage(POINTS)) == len(POINTS) - 1

    @pytest.mark.parametrize("k,expected", [(1, [0, 0, 0, 0]), (2, [0, 0, 1, 1]), (4, [0, 1, 2, 3])])
    def test_cut_tree(self, k, expected):
        merges = ward_linkage(POINTS)
        assert cut_tree(merges, k) == expected


class TestClusterQuality:
    """Test silhouette and Davies-Bouldin helpers."""

    def test_silhouette_well_separated(self):
        scores = silhouette_samples(POINTS, [0, 0, 1, 1])
        assert scores[0] == pytest.approx(9.5 / 10.5)
        assert all(s > 0.8 for s in scores)

    def test_silhouette_single_cluster(self):
        assert silhouette_samples(POINTS, [0, 0, 0, 0]) == [0.0] * 4

    def test_silhouette_singletons(self):
        assert silhouette_samples([[0.0], [5.0]], [0, 1]) == [0.0, 0.0]

    def test_davies_bouldin(self):
        scores = davies_bouldin_scores(POINTS, [0, 0, 1, 1])
        assert scores[0] == pytest.approx(0.1)
        assert scores[1] == pytest.approx(0.1)


class TestHierarchicalClusterer:
    """Test automatic cluster count selection."""

    def test_two_groups(self):
        assert HierarchicalClusterer().fit(POINTS) == [0, 0, 1, 1]

    @pytest.mark.parametrize("n", [0, 1, 2])
    def test_small_inputs(self, n):
        assert HierarchicalClusterer().fit([[float(i)] for i in range(n)]) == list(range(n))

    def test_max_clusters_bounds_result(self):
        points = [[0.0], [10.0], [20.0], [30.0], [40.0]]
        labels = HierarchicalClusterer(max_clusters=2).fit(points)
        assert len(set(labels)) == 2
