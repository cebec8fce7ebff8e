"""
CodeContext Configuration Module

Re-exports commonly used functions for cleaner imports across the codebase.
"""

# Logging (most commonly used)
from codecontext.configs.logging import get_logger, setup_logging

# Paths
from codecontext.configs.paths import ensure_data_dir, expand_home, get_data_path

# Constants
from codecontext.configs.constants import (
    DEFAULT_PROGRESS_INTERVAL,
    GRAPH_VERSION,
    LANGUAGE_EXTENSIONS,
    MAX_FILE_SIZE,
    TIMEOUTS,
    get_timeout,
)

# Exclude patterns
from codecontext.configs.exclude_patterns import (
    DEFAULT_EXCLUDE_PATTERNS,
    deduplicate,
    get_default_exclude_patterns,
    split_negations,
)

# YAML config
from codecontext.configs.yaml_config import (
    DEFAULT_CONFIG_YAML,
    create_default_config,
    get_config_path,
    load_yaml_config,
    save_yaml_config,
)

# Runtime
from codecontext.configs.runtime import DEFAULT_CONFIG, get_full_config

# Note: services.py is NOT imported here to avoid circular imports.
# Server state should be imported directly: from codecontext.configs.services import ...

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # Paths
    "get_data_path",
    "ensure_data_dir",
    "expand_home",
    # Constants
    "DEFAULT_PROGRESS_INTERVAL",
    "GRAPH_VERSION",
    "LANGUAGE_EXTENSIONS",
    "MAX_FILE_SIZE",
    "TIMEOUTS",
    "get_timeout",
    # Exclude patterns
    "DEFAULT_EXCLUDE_PATTERNS",
    "deduplicate",
    "get_default_exclude_patterns",
    "split_negations",
    # YAML config
    "DEFAULT_CONFIG_YAML",
    "get_config_path",
    "load_yaml_config",
    "save_yaml_config",
    "create_default_config",
    # Runtime
    "DEFAULT_CONFIG",
    "get_full_config",
]
