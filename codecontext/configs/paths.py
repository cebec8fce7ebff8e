"""
CodeContext Data Paths

User-level data directory and per-project config locations.
"""

import os
from pathlib import Path

DEFAULT_DATA_PATH = Path.home() / ".codecontext"

# Per-project directory created by project init
PROJECT_CONFIG_DIR = ".codecontext"
PROJECT_CONFIG_FILE = "config.yaml"


def get_data_path() -> Path:
    """Get the CodeContext data directory path."""
    data_path = os.environ.get("CODECONTEXT_DATA_PATH")
    if data_path:
        return Path(data_path).expanduser()
    return DEFAULT_DATA_PATH


def ensure_data_dir() -> Path:
    """Ensure the data directory exists and return it."""
    data_path = get_data_path()
    data_path.mkdir(parents=True, exist_ok=True)
    return data_path


def get_project_config_dir(project_dir: str | Path) -> Path:
    """Get the .codecontext directory for a project."""
    return Path(project_dir) / PROJECT_CONFIG_DIR


def expand_home(path: str) -> str:
    """
    Expand a leading ``~/`` using the HOME environment variable.

    Paths without the prefix are returned unchanged.
    """
    if path.startswith("~/"):
        home = os.environ.get("HOME") or str(Path.home())
        return os.path.join(home, path[2:])
    return path
