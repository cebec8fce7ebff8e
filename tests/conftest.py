"""
Pytest fixtures for CodeContext tests.
"""

import os
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

# Add project root to path for codecontext imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set test environment
os.environ["CODECONTEXT_DATA_PATH"] = "/tmp/codecontext_test_data"
os.environ["CODECONTEXT_LOG_FILE"] = "/tmp/codecontext_test_data/codecontext.log"


def git(repo: Path, *args: str) -> subprocess.CompletedProcess:
    return subprocess.run(["git", *args], cwd=repo, capture_output=True, text=True)


def commit_files(repo: Path, files: dict[str, str], message: str) -> None:
    """Write files into a repository and commit them."""
    for rel, content in files.items():
        path = repo / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    git(repo, "add", ".")
    git(repo, "commit", "-m", message)


def write_tree(root: Path, files: dict[str, str]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def temp_git_repo(temp_dir: Path) -> Path:
    """Create a temporary git repository."""
    git(temp_dir, "init")
    git(temp_dir, "config", "user.email", "test@test.com")
    git(temp_dir, "config", "user.name", "Test User")
    git(temp_dir, "config", "commit.gpgsign", "false")

    # Create an initial commit
    commit_files(temp_dir, {"README.md": "# Test Repo\n"}, "Initial commit")
    return temp_dir


@pytest.fixture
def make_tree(temp_dir: Path) -> Callable[[dict[str, str]], Path]:
    """Write ``{relative path: content}`` below temp_dir and return it."""

    def _make(files: dict[str, str]) -> Path:
        write_tree(temp_dir, files)
        return temp_dir

    return _make


@pytest.fixture
def server_state(temp_dir: Path):
    """Fresh shared server state targeting temp_dir; stopped afterwards."""
    from codecontext.configs.runtime import get_full_config
    from codecontext.configs.services import reset_server_state

    state = reset_server_state(get_full_config(temp_dir))
    yield state
    state.stop()
