"""
Path Matcher

Decides whether the walker should skip a path. Handles cross-platform
separators, layered exclude/include (``!``) patterns, ``**`` globs, and
import traversal validation.

Single-segment globs follow shell semantics without crossing ``/``:
``*`` (any run), ``?`` (one char), ``[...]`` / ``[^...]`` classes with
ranges, and ``\\`` escapes.
"""

import logging
import os
import posixpath
import re
import threading
from functools import lru_cache
from typing import Callable, Optional, Sequence

from codecontext.configs.constants import (
    MAX_CACHED_PATTERNS,
    MAX_NORMALIZATION_CACHE,
    MAX_UPWARD_TRAVERSAL,
    SENSITIVE_PATH_PREFIXES,
    SENSITIVE_PATH_SUFFIXES,
    SENSITIVE_WINDOWS_PREFIX,
)
from codecontext.configs.exclude_patterns import get_default_exclude_patterns, split_negations
from codecontext.configs.logging import get_logger
from codecontext.exceptions import ImportEscapesProjectError, PatternError

logger = get_logger("analyzer.path_matcher")


@lru_cache(maxsize=4096)
def compile_glob(pattern: str) -> re.Pattern:
    """
    Compile a glob into an anchored regex where wildcards never match ``/``.

    Raises:
        PatternError: On an unterminated class, empty class, bad range,
            or trailing escape
    """
    out = []
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "\\":
            i += 1
            if i >= n:
                raise PatternError("trailing escape in pattern", {"pattern": pattern})
            out.append(re.escape(pattern[i]))
        elif c == "[":
            i, char_class = _translate_class(pattern, i + 1)
            out.append(char_class)
            continue
        else:
            out.append(re.escape(c))
        i += 1
    return re.compile("".join(out), re.DOTALL)


def _translate_class(pattern: str, i: int) -> tuple[int, str]:
    """Translate a bracket class starting after ``[``; returns (next index, regex)."""
    n = len(pattern)
    negate = False
    if i < n and pattern[i] in "^!":
        negate = True
        i += 1

    items = []
    while True:
        if i >= n:
            raise PatternError("unbalanced bracket in pattern", {"pattern": pattern})
        if pattern[i] == "]":
            break
        lo, i = _class_char(pattern, i)
        if i + 1 < n and pattern[i] == "-" and pattern[i + 1] != "]":
            hi, i = _class_char(pattern, i + 1)
            if hi < lo:
                raise PatternError("invalid character range in pattern", {"pattern": pattern})
            items.append(f"{re.escape(lo)}-{re.escape(hi)}")
        else:
            items.append(re.escape(lo))

    if not items:
        raise PatternError("empty character class in pattern", {"pattern": pattern})

    body = "".join(items)
    if negate:
        return i + 1, f"[^/{body}]"
    return i + 1, f"(?!/)[{body}]"


def _class_char(pattern: str, i: int) -> tuple[str, int]:
    if pattern[i] == "\\":
        if i + 1 >= len(pattern):
            raise PatternError("trailing escape in pattern", {"pattern": pattern})
        return pattern[i + 1], i + 2
    return pattern[i], i + 1


def match_glob(pattern: str, name: str) -> bool:
    """Match ``name`` against a glob; raises PatternError for malformed globs."""
    return compile_glob(pattern).fullmatch(name) is not None


def _match_segments(path_parts: Sequence[str], pattern_parts: Sequence[str], pi: int, qi: int) -> bool:
    """Two-index walk where ``**`` consumes zero or more path segments."""
    while qi < len(pattern_parts):
        segment = pattern_parts[qi]
        if segment == "**":
            if all(p == "**" for p in pattern_parts[qi:]):
                return True
            for skip in range(pi, len(path_parts) + 1):
                if _match_segments(path_parts, pattern_parts, skip, qi + 1):
                    return True
            return False
        if pi >= len(path_parts):
            return False
        if not match_glob(segment, path_parts[pi]):
            return False
        pi += 1
        qi += 1
    return pi == len(path_parts)


def match_double_star(path: str, pattern: str) -> bool:
    """Match a forward-slash path against a pattern containing ``**``."""
    return _match_segments(path.split("/"), pattern.split("/"), 0, 0)


class PathMatcher:
    """
    Layered exclude/include matcher with bounded caches.

    Caches (normalization, pattern normalization, merged pattern list) are
    read without locking and written under ``_lock``; any pattern change
    clears them together.
    """

    def __init__(
        self,
        exclude_patterns: Optional[list[str]] = None,
        use_default_excludes: bool = True,
        log: Optional[logging.Logger] = None,
        progress_callback: Optional[Callable[[str], None]] = None,
    ):
        self._lock = threading.RLock()
        self._exclude_patterns: tuple[str, ...] = ()
        self._include_patterns: tuple[str, ...] = ()
        self._use_default_excludes = use_default_excludes
        self._merged: Optional[tuple[str, ...]] = None
        self._normalize_cache: dict[str, str] = {}
        self._pattern_cache: dict[str, str] = {}
        self._reported_patterns: set[str] = set()
        self._logger = log or logger
        self._progress_callback = progress_callback
        if exclude_patterns:
            self.set_exclude_patterns(exclude_patterns)

    # --- Configuration ---

    def set_exclude_patterns(self, patterns: list[str]) -> None:
        """Replace user patterns; ``!``-prefixed entries become include patterns."""
        excludes, includes = split_negations(list(patterns))
        with self._lock:
            self._exclude_patterns = tuple(excludes)
            self._include_patterns = tuple(includes)
            self._invalidate_caches()

    def set_use_default_excludes(self, use: bool) -> None:
        with self._lock:
            if self._use_default_excludes != use:
                self._use_default_excludes = use
                self._invalidate_caches()

    def set_logger(self, log: logging.Logger) -> None:
        self._logger = log

    def set_progress_callback(self, callback: Optional[Callable[[str], None]]) -> None:
        self._progress_callback = callback

    @property
    def exclude_patterns(self) -> list[str]:
        return list(self._exclude_patterns)

    @property
    def include_patterns(self) -> list[str]:
        return list(self._include_patterns)

    @property
    def use_default_excludes(self) -> bool:
        return self._use_default_excludes

    def _invalidate_caches(self) -> None:
        # Caller holds _lock
        self._merged = None
        self._normalize_cache = {}
        self._pattern_cache = {}
        self._reported_patterns = set()

    def clear_caches(self) -> None:
        with self._lock:
            self._invalidate_caches()

    # --- Normalization ---

    def normalize(self, path: str) -> str:
        """Clean a path in OS form; empty input becomes ``.``."""
        if not path:
            return "."
        cached = self._normalize_cache.get(path)
        if cached is not None:
            return cached

        result = os.path.normpath(path)
        with self._lock:
            if len(self._normalize_cache) < MAX_NORMALIZATION_CACHE:
                self._normalize_cache[path] = result
        return result

    def normalize_for_pattern(self, path: str) -> str:
        """
        Forward-slash cleaned form used for matching.

        Backslashes are converted before cleaning, so ``\\\\server\\share``
        and ``//server/share`` both keep their UNC prefix.
        """
        if not path:
            return "."
        cached = self._pattern_cache.get(path)
        if cached is not None:
            return cached

        result = posixpath.normpath(path.replace("\\", "/"))
        with self._lock:
            if len(self._pattern_cache) < MAX_NORMALIZATION_CACHE:
                self._pattern_cache[path] = result
        return result

    # --- Matching ---

    def merged_patterns(self) -> tuple[str, ...]:
        """Default patterns (when enabled) followed by user exclude patterns."""
        merged = self._merged
        if merged is not None:
            return merged

        with self._lock:
            if self._merged is not None:
                return self._merged
            defaults = get_default_exclude_patterns() if self._use_default_excludes else []
            merged = tuple(defaults) + self._exclude_patterns
            if len(merged) <= MAX_CACHED_PATTERNS:
                self._merged = merged
            return merged

    def should_skip(self, path: str) -> bool:
        """True if the path matches an exclude pattern and no include pattern."""
        includes = self._include_patterns
        if includes and self.matches_pattern(path, includes):
            return False
        return self.matches_pattern(path, self.merged_patterns())

    def matches_pattern(self, path: str, patterns: Sequence[str]) -> bool:
        """
        Match a path against patterns.

        Tried in order for each pattern: full path, basename, each path
        component, then the ``**`` segment matcher. Malformed patterns are
        reported and treated as non-matching.
        """
        normalized = self.normalize_for_pattern(path)
        has_separator = "/" in normalized
        basename = posixpath.basename(normalized)
        components = [c for c in normalized.split("/") if c]

        for raw_pattern in patterns:
            pattern = raw_pattern.replace("\\", "/")
            try:
                if match_glob(pattern, normalized):
                    return True
                if has_separator and match_glob(pattern, basename):
                    return True
                for component in components:
                    if match_glob(pattern, component):
                        return True
                if "**" in pattern and match_double_star(normalized, pattern):
                    return True
            except PatternError as e:
                self._report_pattern_error(raw_pattern, e)
        return False

    def _report_pattern_error(self, pattern: str, error: PatternError) -> None:
        with self._lock:
            if pattern in self._reported_patterns:
                return
            self._reported_patterns.add(pattern)
        self._logger.warning(f"Invalid pattern {pattern!r}: {error.message}")
        if self._progress_callback is not None:
            self._progress_callback(f'⚠️  Invalid pattern "{pattern}": {error.message}')

    # --- Traversal validation ---

    def validate_import(self, import_path: str, base_dir: str) -> str:
        """
        Check that an import stays within reach of the project.

        Rejects more than two upward (``..``) segments, and any target that
        resolves into a sensitive system location.

        Returns:
            Resolved absolute path (OS form)

        Raises:
            ImportEscapesProjectError: If the import is rejected
        """
        raw = import_path.replace("\\", "/")
        raw_upward = sum(1 for part in raw.split("/") if part == "..")
        if raw_upward > MAX_UPWARD_TRAVERSAL:
            raise ImportEscapesProjectError(
                "Import traverses too many parent directories",
                {"import": import_path, "levels": raw_upward},
            )

        cleaned = posixpath.normpath(raw)
        leading = 0
        for part in cleaned.split("/"):
            if part != "..":
                break
            leading += 1
        if leading > MAX_UPWARD_TRAVERSAL:
            raise ImportEscapesProjectError(
                "Import traverses too many parent directories",
                {"import": import_path, "levels": leading},
            )

        resolved = os.path.abspath(os.path.join(base_dir, cleaned))
        if _is_sensitive_path(resolved):
            raise ImportEscapesProjectError(
                "Import resolves into a system directory",
                {"import": import_path, "resolved": resolved},
            )
        return resolved


def _is_sensitive_path(resolved: str) -> bool:
    path = resolved.replace("\\", "/")
    # Drop a Windows drive letter
    if len(path) > 1 and path[1] == ":":
        path = path[2:]
    if path.lower().startswith(SENSITIVE_WINDOWS_PREFIX):
        return True
    if path.endswith(SENSITIVE_PATH_SUFFIXES):
        return True
    return any(path.startswith(prefix) for prefix in SENSITIVE_PATH_PREFIXES)
