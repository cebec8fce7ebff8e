"""
CodeContext Constants

Static configuration values that rarely change: graph version, supported
extensions, cache bounds, file size limits, and timeout configuration.
"""

# --- Graph ---

GRAPH_VERSION = "2.0.0"

# --- Progress Reporting ---

DEFAULT_PROGRESS_INTERVAL = 10
MIN_PROGRESS_INTERVAL = 1

# --- Path Matcher Caches ---

MAX_CACHED_PATTERNS = 1000  # Merged pattern lists above this are not cached
MAX_NORMALIZATION_CACHE = 1000  # Entries per normalization cache

# Import traversal guard
MAX_UPWARD_TRAVERSAL = 2
SENSITIVE_PATH_PREFIXES = ("/etc/", "/bin/", "/sbin/")
SENSITIVE_PATH_SUFFIXES = ("/etc/passwd", "/bin/sh")
SENSITIVE_WINDOWS_PREFIX = "/windows/system32"

# --- Supported Extensions ---
# Gate for the directory walker, keyed by language name

LANGUAGE_EXTENSIONS = {
    "typescript": (".ts", ".tsx", ".mts", ".cts"),
    "javascript": (".js", ".jsx", ".mjs", ".cjs"),
    "go": (".go",),
    "python": (".py", ".pyi"),
    "java": (".java",),
    "rust": (".rs",),
    "json": (".json",),
    "yaml": (".yaml", ".yml"),
    "markdown": (".md",),
}

# Opt-in languages
DART_EXTENSIONS = (".dart",)

# Candidate extensions for relative JS/TS import resolution, in order
RESOLVABLE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")

# --- File Size Limits ---

MAX_FILE_SIZE = 10 * 1024 * 1024  # Larger files are kept without symbols

# --- Watcher ---

DEFAULT_DEBOUNCE_MS = 500

# --- Timeout Configuration ---
# Centralized timeout values (in seconds)

TIMEOUTS = {
    "git_command": 10,  # Default git command timeout
    "git_log": 30,  # History capture for semantic analysis
}


def get_timeout(key: str, default: int | float | None = None) -> int | float:
    """
    Get a timeout value by key.

    Args:
        key: Timeout key from TIMEOUTS dict
        default: Default value if key not found

    Returns:
        Timeout value in seconds
    """
    if default is None:
        default = TIMEOUTS["git_command"]
    return TIMEOUTS.get(key, default)
