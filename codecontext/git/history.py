"""
Git History

Reads commit history (with touched files) for co-change analysis.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from codecontext.configs.constants import get_timeout
from codecontext.configs.logging import get_logger
from codecontext.exceptions import GitCommandError, GitUnavailableError
from codecontext.git.subprocess_utils import git_check, git_single_line, run_git_command

logger = get_logger("git.history")

# Field separator unlikely to appear in commit subjects
COMMIT_MARKER = "\x1ecommit\x1f"
LOG_FORMAT = f"{COMMIT_MARKER}%H\x1f%an\x1f%at\x1f%s"

NO_COMMITS_MARKERS = ("does not have any commits", "bad default revision")


@dataclass
class CommitInfo:
    """One commit and the files it touched (relative to the repository path)."""

    hash: str
    author: str
    timestamp: datetime
    message: str
    files: list[str] = field(default_factory=list)


class GitAnalyzer:
    """Git access for one working-tree directory."""

    def __init__(self, repo_path: str):
        if not os.path.isdir(repo_path):
            raise GitUnavailableError(f"Directory does not exist: {repo_path}")
        self.repo_path = os.path.abspath(repo_path)

    def is_git_repository(self) -> bool:
        """True if the directory is inside a git working tree."""
        return git_check(["rev-parse", "--is-inside-work-tree"], self.repo_path)

    def repository_root(self) -> Optional[str]:
        return git_single_line(["rev-parse", "--show-toplevel"], self.repo_path)

    def get_commit_history(self, days: int) -> list[CommitInfo]:
        """
        Commits from the last ``days`` days, newest first, merges excluded.

        File paths are relative to the analyzed directory and limited to it.

        Raises:
            GitCommandError: If git log fails for a reason other than an empty history
        """
        args = [
            "log",
            f"--since={days}.days.ago",
            "--name-only",
            "--no-merges",
            "--relative",
            f"--pretty=format:{LOG_FORMAT}",
        ]
        returncode, stdout, stderr = run_git_command(args, self.repo_path, int(get_timeout("git_log", 30)))
        if returncode != 0:
            if any(marker in stderr for marker in NO_COMMITS_MARKERS):
                return []
            raise GitCommandError("git log failed", {"stderr": stderr.strip()})
        return parse_git_log(stdout)


def parse_git_log(output: str) -> list[CommitInfo]:
    """Parse ``git log --name-only`` output produced with LOG_FORMAT."""
    commits = []
    for block in output.split(COMMIT_MARKER):
        if not block.strip():
            continue
        header, _, body = block.partition("\n")
        parts = header.split("\x1f")
        if len(parts) < 4:
            logger.debug(f"Skipping malformed log entry: {header[:80]!r}")
            continue
        commit_hash, author, timestamp = parts[0], parts[1], parts[2]
        message = "\x1f".join(parts[3:])
        try:
            when = datetime.fromtimestamp(int(timestamp), tz=timezone.utc)
        except ValueError:
            continue
        files = [line.strip() for line in body.splitlines() if line.strip()]
        commits.append(CommitInfo(hash=commit_hash, author=author, timestamp=when, message=message, files=files))
    return commits
