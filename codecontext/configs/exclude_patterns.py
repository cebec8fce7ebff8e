"""
CodeContext Exclude Patterns

Built-in deny list merged into the path matcher when default excludes are
enabled. Patterns use glob syntax with ``**`` for any number of segments.
"""

from functools import lru_cache

# --- Default Exclude Patterns ---
# Grouped by ecosystem; some ecosystems share directories, so entries repeat

DEFAULT_EXCLUDE_PATTERNS = [
    # JavaScript/TypeScript
    "node_modules/**",
    ".next/**",
    ".nuxt/**",
    ".cache/**",
    ".parcel-cache/**",
    "bower_components/**",
    # Python
    "__pycache__/**",
    "*.py[cod]",
    "*$py.class",
    ".venv/**",
    "venv/**",
    "env/**",
    ".Python",
    ".pytest_cache/**",
    ".mypy_cache/**",
    "*.egg-info/**",
    ".tox/**",
    ".eggs/**",
    "htmlcov/**",
    ".hypothesis/**",
    ".coverage",
    "*.cover",
    ".coverage.*",
    # Java/Kotlin/Scala
    "target/**",
    ".gradle/**",
    "*.class",
    "*.jar",
    # Go
    "vendor/**",
    # Rust
    "target/**",
    # Ruby
    ".bundle/**",
    "vendor/bundle/**",
    # PHP
    "vendor/**",
    ".phpunit.cache/**",
    # .NET
    "bin/**",
    "obj/**",
    "packages/**",
    ".vs/**",
    "*.dll",
    "*.exe",
    # Build outputs
    "dist/**",
    "build/**",
    "out/**",
    "_build/**",
    # Testing
    "coverage/**",
    ".nyc_output/**",
    "test-results/**",
    "jest-cache/**",
    # Version control
    ".git/**",
    ".svn/**",
    ".hg/**",
    ".bzr/**",
    # IDE
    ".idea/**",
    ".vscode/**",
    "*.swp",
    "*.swo",
    "*~",
    ".project",
    ".classpath",
    ".settings/**",
    # OS
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
    # Logs and temp
    "*.log",
    "logs/**",
    "tmp/**",
    "temp/**",
    "*.tmp",
    "*.temp",
    "*.bak",
    "*.backup",
    "*.old",
    # Package managers
    "npm-debug.log*",
    "yarn-debug.log*",
    "yarn-error.log*",
    "pnpm-debug.log*",
    ".pnpm-store/**",
    # CI/CD
    ".terraform/**",
    ".serverless/**",
    ".github/workflows/**",
    ".gitlab/**",
    # Documentation builds
    "_site/**",
    ".docusaurus/**",
    "site/**",
    # Mobile
    ".expo/**",
    ".expo-shared/**",
    # Certificates and secrets
    "*.pem",
    "*.key",
    "*.cert",
    "*.crt",
    ".env.local",
    ".env.*.local",
]


def deduplicate(patterns: list[str]) -> list[str]:
    """Remove repeated patterns, keeping first-seen order."""
    seen: set[str] = set()
    result = []
    for pattern in patterns:
        if pattern not in seen:
            seen.add(pattern)
            result.append(pattern)
    return result


@lru_cache(maxsize=1)
def _default_exclude_patterns() -> tuple[str, ...]:
    return tuple(deduplicate(DEFAULT_EXCLUDE_PATTERNS))


def get_default_exclude_patterns() -> list[str]:
    """Get the deduplicated built-in exclude patterns."""
    return list(_default_exclude_patterns())


def split_negations(patterns: list[str]) -> tuple[list[str], list[str]]:
    """
    Split user patterns into exclude and include lists.

    Entries prefixed with ``!`` re-include paths; the prefix is stripped.

    Returns:
        Tuple of (exclude_patterns, include_patterns)
    """
    excludes = []
    includes = []
    for pattern in patterns:
        if pattern.startswith("!"):
            includes.append(pattern[1:])
        else:
            excludes.append(pattern)
    return excludes, includes
