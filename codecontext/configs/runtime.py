"""
CodeContext Runtime Configuration

Runtime defaults and configuration merging logic.
Combines defaults, the project YAML config, and environment variables.
"""

import os
from pathlib import Path

from codecontext.configs.constants import DEFAULT_DEBOUNCE_MS, DEFAULT_PROGRESS_INTERVAL
from codecontext.configs.yaml_config import load_yaml_config

# --- Default Runtime Configuration ---

DEFAULT_CONFIG = {
    "use_default_excludes": True,
    "exclude_patterns": [],
    "progress_interval": DEFAULT_PROGRESS_INTERVAL,
    "analysis_period_days": 30,
    "enable_dart": False,
    "debounce_ms": DEFAULT_DEBOUNCE_MS,
}


def _env_flag(name: str) -> bool | None:
    value = os.environ.get(name)
    if value is None or value == "":
        return None
    return value.lower() in ("true", "1", "yes")


def get_full_config(project_dir: str | Path | None = None) -> dict:
    """
    Get full configuration merged from defaults, YAML, and environment.

    Priority (highest wins):
    1. Environment variables
    2. Project config.yaml
    3. DEFAULT_CONFIG

    Args:
        project_dir: Project root holding .codecontext/config.yaml

    Returns:
        Merged configuration dictionary
    """
    config = dict(DEFAULT_CONFIG)
    config["exclude_patterns"] = list(DEFAULT_CONFIG["exclude_patterns"])

    env_target = os.environ.get("CODECONTEXT_TARGET_DIR")
    config["target_dir"] = str(project_dir or env_target or os.getcwd())

    yaml_config = load_yaml_config(config["target_dir"])

    if "use_default_excludes" in yaml_config:
        config["use_default_excludes"] = bool(yaml_config["use_default_excludes"])
    if yaml_config.get("exclude_patterns"):
        config["exclude_patterns"] = [str(p) for p in yaml_config["exclude_patterns"]]
    progress = yaml_config.get("progress") or {}
    if "interval" in progress:
        config["progress_interval"] = int(progress["interval"])
    semantic = yaml_config.get("semantic") or {}
    if "analysis_period_days" in semantic:
        config["analysis_period_days"] = int(semantic["analysis_period_days"])
    languages = yaml_config.get("languages") or {}
    if "dart" in languages:
        config["enable_dart"] = bool(languages["dart"])
    watch = yaml_config.get("watch") or {}
    if "debounce_ms" in watch:
        config["debounce_ms"] = int(watch["debounce_ms"])

    config["_yaml"] = yaml_config

    # Environment overrides
    if os.environ.get("CODECONTEXT_DEBOUNCE_MS"):
        try:
            config["debounce_ms"] = int(os.environ["CODECONTEXT_DEBOUNCE_MS"])
        except ValueError:
            pass

    enable_dart = _env_flag("CODECONTEXT_ENABLE_DART")
    if enable_dart is not None:
        config["enable_dart"] = enable_dart

    return config
