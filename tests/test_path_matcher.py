"""
Tests for PathMatcher

Normalization, glob matching, layered exclude/include patterns, caching,
and import traversal validation.
"""

import logging
import os

import pytest

from codecontext.analyzer.path_matcher import PathMatcher, match_double_star, match_glob
from codecontext.configs.exclude_patterns import (
    DEFAULT_EXCLUDE_PATTERNS,
    get_default_exclude_patterns,
    split_negations,
)
from codecontext.exceptions import ImportEscapesProjectError, PatternError


class TestNormalization:
    """Test path normalization."""

    @pytest.mark.parametrize("path", ["a/b/../c", "./x//y/", "", "a\\b\\c", "/abs/./path/..", "\\\\server\\share\\x"])
    def test_normalize_idempotent(self, path):
        matcher = PathMatcher()
        once = matcher.normalize(path)
        assert matcher.normalize(once) == once

    @pytest.mark.parametrize("path", ["a/b/../c", "./x//y/", "", "a\\b\\c", "\\\\server\\share\\x"])
    def test_normalize_for_pattern_idempotent(self, path):
        matcher = PathMatcher()
        once = matcher.normalize_for_pattern(path)
        assert matcher.normalize_for_pattern(once) == once

    def test_empty_path_becomes_dot(self):
        matcher = PathMatcher()
        assert matcher.normalize("") == "."
        assert matcher.normalize_for_pattern("") == "."

    @pytest.mark.parametrize("path", ["src/app/main.ts", "a/b/../c/d.go", "deep/nested/dir/file.py"])
    def test_separator_neutrality(self, path):
        matcher = PathMatcher()
        assert matcher.normalize_for_pattern(path.replace("/", "\\")) == matcher.normalize_for_pattern(path)

    def test_unc_prefix_kept(self):
        matcher = PathMatcher()
        assert matcher.normalize_for_pattern("\\\\server\\share\\x").startswith("//server")


class TestGlobMatching:
    """Test single-segment and double-star glob matching."""

    def test_star_does_not_cross_separator(self):
        assert match_glob("*.ts", "index.ts")
        assert not match_glob("*.ts", "src/index.ts")

    def test_question_mark_and_classes(self):
        assert match_glob("file?.py", "file1.py")
        assert match_glob("*.py[cod]", "module.pyc")
        assert not match_glob("*.py[cod]", "module.pyx")
        assert match_glob("[a-c]*.go", "build.go")
        assert not match_glob("[^a-c]*.go", "build.go")

    def test_escape(self):
        assert match_glob("\\*.txt", "*.txt")
        assert not match_glob("\\*.txt", "a.txt")

    @pytest.mark.parametrize("pattern", ["[abc", "[]", "[z-a]", "trailing\\"])
    def test_malformed_patterns_raise(self, pattern):
        with pytest.raises(PatternError):
            match_glob(pattern, "anything")

    def test_double_star_zero_or_more_segments(self):
        assert match_double_star("src/a.test.ts", "**/*.test.*")
        assert match_double_star("a.test.ts", "**/*.test.*")
        assert match_double_star("deep/nested/b.test.js", "**/*.test.*")
        assert not match_double_star("src/a.ts", "**/*.test.*")

    def test_double_star_in_middle(self):
        assert match_double_star("vendor/x/y/z.go", "vendor/**/*.go")
        assert match_double_star("vendor/z.go", "vendor/**/*.go")
        assert not match_double_star("other/z.go", "vendor/**/*.go")


class TestShouldSkip:
    """Test layered exclude/include decisions."""

    def test_default_excludes(self):
        matcher = PathMatcher()
        assert matcher.should_skip("node_modules/react/index.js")
        assert matcher.should_skip("dist/app.js")
        assert not matcher.should_skip("src/index.ts")

    def test_defaults_can_be_disabled(self):
        matcher = PathMatcher(use_default_excludes=False)
        assert not matcher.should_skip("node_modules/react/index.js")

    def test_user_patterns_merge_after_defaults(self):
        matcher = PathMatcher(exclude_patterns=["docs/**"])
        merged = matcher.merged_patterns()
        assert merged[-1] == "docs/**"
        assert merged[: len(get_default_exclude_patterns())] == tuple(get_default_exclude_patterns())

    def test_negation_wins(self):
        matcher = PathMatcher(exclude_patterns=["vendor/**", "!vendor/our-company/**"])
        assert matcher.should_skip("vendor/third/x.go")
        assert not matcher.should_skip("vendor/our-company/y.go")
        assert not matcher.should_skip("src/main.go")

    def test_negation_overrides_defaults(self):
        matcher = PathMatcher(exclude_patterns=["!node_modules/my-local-package/**"])
        assert not matcher.should_skip("node_modules/my-local-package/index.js")
        assert matcher.should_skip("node_modules/other/index.js")

    def test_basename_and_component_matching(self):
        matcher = PathMatcher(exclude_patterns=["secret.ts", "generated"], use_default_excludes=False)
        assert matcher.should_skip("src/deep/secret.ts")
        assert matcher.should_skip("src/generated/types.ts")
        assert not matcher.should_skip("src/types.ts")

    def test_backslash_paths(self):
        matcher = PathMatcher(exclude_patterns=["build/**"], use_default_excludes=False)
        assert matcher.should_skip("build\\out\\main.js")

    def test_cache_cold_and_warm_agree(self):
        paths = ["src/a.ts", "node_modules/x/y.js", "vendor/our-company/y.go", "dist/app.js", "a.test.ts"]
        matcher = PathMatcher(exclude_patterns=["**/*.test.*", "!vendor/our-company/**"])
        warm = [matcher.should_skip(p) for p in paths]
        warm_again = [matcher.should_skip(p) for p in paths]
        matcher.clear_caches()
        cold = [matcher.should_skip(p) for p in paths]
        assert warm == warm_again == cold

    def test_changing_patterns_invalidates_merged_cache(self):
        matcher = PathMatcher(use_default_excludes=False)
        assert not matcher.should_skip("docs/readme.md")
        matcher.set_exclude_patterns(["docs/**"])
        assert matcher.should_skip("docs/readme.md")

    def test_invalid_pattern_is_reported_once_and_never_matches(self):
        messages = []
        log = logging.getLogger("codecontext.test.matcher")
        matcher = PathMatcher(
            exclude_patterns=["[broken"],
            use_default_excludes=False,
            log=log,
            progress_callback=messages.append,
        )
        assert not matcher.should_skip("src/a.ts")
        assert not matcher.should_skip("src/b.ts")
        assert len(messages) == 1
        assert "[broken" in messages[0]


class TestDefaultPatterns:
    """Test the built-in exclude list."""

    def test_defaults_are_deduplicated_in_order(self):
        defaults = get_default_exclude_patterns()
        assert len(defaults) == len(set(defaults))
        assert len(defaults) < len(DEFAULT_EXCLUDE_PATTERNS)
        assert defaults[0] == DEFAULT_EXCLUDE_PATTERNS[0]

    def test_split_negations(self):
        excludes, includes = split_negations(["a/**", "!a/keep/**", "b"])
        assert excludes == ["a/**", "b"]
        assert includes == ["a/keep/**"]


class TestValidateImport:
    """Test import traversal defense."""

    def test_relative_import_resolves(self, temp_dir):
        matcher = PathMatcher()
        resolved = matcher.validate_import("./b", str(temp_dir / "src"))
        assert resolved == os.path.join(str(temp_dir), "src", "b")

    def test_two_levels_up_allowed(self, temp_dir):
        matcher = PathMatcher()
        base = temp_dir / "a" / "b" / "c"
        assert matcher.validate_import("../../x", str(base)) == os.path.join(str(temp_dir), "a", "x")

    def test_more_than_two_levels_rejected(self, temp_dir):
        matcher = PathMatcher()
        with pytest.raises(ImportEscapesProjectError):
            matcher.validate_import("../../../x", str(temp_dir / "a" / "b" / "c"))

    @pytest.mark.parametrize("target", ["/etc/passwd", "/bin/sh", "/sbin/init"])
    def test_sensitive_targets_rejected(self, target):
        matcher = PathMatcher()
        with pytest.raises(ImportEscapesProjectError):
            matcher.validate_import(target, "/home/user/project")
