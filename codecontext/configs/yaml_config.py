"""
CodeContext YAML Configuration

Project init and loading for .codecontext/config.yaml.
"""

from pathlib import Path

import yaml

from codecontext.configs.logging import get_logger
from codecontext.configs.paths import PROJECT_CONFIG_FILE, get_project_config_dir
from codecontext.exceptions import ConfigurationError

logger = get_logger("configs.yaml")

# --- Default Config Template ---

DEFAULT_CONFIG_YAML = """\
# CodeContext Configuration
version: "2.0"

# File Patterns
include_patterns:
  - "**/*.ts"
  - "**/*.tsx"
  - "**/*.js"
  - "**/*.jsx"
  - "**/*.py"
  - "**/*.go"

# Use built-in exclude patterns for common directories/files that are typically
# not useful for code analysis (node_modules, .git, build outputs, etc.)
# Set to false to disable all default excludes and use only your patterns
use_default_excludes: true

# Additional patterns to exclude (merged with defaults if use_default_excludes is true)
# Use ! prefix to explicitly include files that would otherwise be excluded
exclude_patterns:
  - "docs/**"
  - "*.min.js"
  - "*.min.css"
  # - "!node_modules/my-local-package/**"
  # - "!vendor/our-company/**"

# Progress reporting while parsing
progress:
  interval: 10

# Git co-change analysis
semantic:
  analysis_period_days: 30

# Opt-in languages
languages:
  dart: false

# MCP file watching
watch:
  debounce_ms: 500
"""

GITIGNORE_ENTRY = ".codecontext/cache/\n.codecontext/logs/\n"


def get_config_path(project_dir: str | Path) -> Path:
    """Get the path to a project's config.yaml."""
    return get_project_config_dir(project_dir) / PROJECT_CONFIG_FILE


def load_yaml_config(project_dir: str | Path) -> dict:
    """
    Load configuration from <project>/.codecontext/config.yaml.

    Returns:
        Configuration dictionary (empty if file doesn't exist)

    Raises:
        ConfigurationError: If the file exists but is not valid YAML
    """
    config_path = get_config_path(project_dir)
    if not config_path.exists():
        return {}

    try:
        content = yaml.safe_load(config_path.read_text())
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid config file: {config_path}", {"error": str(e)})

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigurationError(f"Config file must contain a mapping: {config_path}")
    return content


def save_yaml_config(project_dir: str | Path, config: dict) -> Path:
    """
    Save configuration to <project>/.codecontext/config.yaml.

    Returns:
        Path of the written file
    """
    config_path = get_config_path(project_dir)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(yaml.safe_dump(config, default_flow_style=False, sort_keys=False))
    return config_path


def create_default_config(project_dir: str | Path, force: bool = False) -> Path:
    """
    Initialize a project: write the default config and gitignore entries.

    Args:
        project_dir: Project root
        force: Overwrite an existing config

    Returns:
        Path of the written config file

    Raises:
        ConfigurationError: If the project is already initialized and force is False
    """
    config_path = get_config_path(project_dir)
    if config_path.exists() and not force:
        raise ConfigurationError(
            "CodeContext project already initialized. Use force to overwrite",
            {"config": str(config_path)},
        )

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(DEFAULT_CONFIG_YAML)

    gitignore = Path(project_dir) / ".gitignore"
    if gitignore.exists():
        existing = gitignore.read_text()
        if GITIGNORE_ENTRY not in existing:
            prefix = "\n" if existing and not existing.endswith("\n") else ""
            with gitignore.open("a") as f:
                f.write(prefix + GITIGNORE_ENTRY)
    else:
        gitignore.write_text(GITIGNORE_ENTRY)

    logger.info(f"Created config: {config_path}")
    return config_path
