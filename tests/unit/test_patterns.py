# FILE PATH: tests/unit/test_patterns.py
# LOCATION: tests/unit/test_patterns.py
# DESCRIPTION: Unit tests for wildcard matching, gitignore parsing and file classification

import pytest

from codepacker.patterns import (
    file_extension,
    is_media_file,
    is_text_file,
    matches_wildcard,
    parse_gitignore_content,
    split_custom_patterns,
)


class TestMatchesWildcard:
    """Test the three matching modes: exact/segment, '**' glob, basename wildcard."""

    def test_basename_wildcard_with_compound_extension(self):
        assert matches_wildcard("src/app.test.js", "*.test.js") is True
        assert matches_wildcard("src/app.js", "*.test.js") is False

    def test_basename_wildcard_at_any_depth(self):
        assert matches_wildcard("src/deep/x.pyc", "*.pyc") is True
        assert matches_wildcard("x.pyc", "*.pyc") is True

    def test_single_star_only_looks_at_basename(self):
        assert matches_wildcard("logs/app.txt", "logs*") is False
        assert matches_wildcard("src/test_utils.py", "test*") is True

    def test_plain_name_matches_path_segment(self):
        assert matches_wildcard("a/b/c.js", "b") is True
        assert matches_wildcard("a/b/c.js", "c.js") is True
        assert matches_wildcard("a/b/c.js", "a/b/c.js") is True

    def test_plain_name_does_not_match_partial_segment(self):
        assert matches_wildcard("a/bb/c.js", "b") is False
        assert matches_wildcard("a/b/c.jsx", "c.js") is False

    def test_double_star_leading_anchor(self):
        assert matches_wildcard("a/b/c.js", "**/cache/*") is False
        assert matches_wildcard("a/cache/c.js", "**/cache/*") is True
        assert matches_wildcard("cache/c.js", "**/cache/*") is True
        assert matches_wildcard("a/mycache/c.js", "**/cache/*") is False

    def test_double_star_crosses_separators(self):
        assert matches_wildcard("docs/api/v1/index.md", "docs/**/*.md") is True
        assert matches_wildcard("src/api/v1/index.md", "docs/**/*.md") is False

    def test_dots_are_literal(self):
        assert matches_wildcard("src/appXtest.js", "*.test.js") is False


class TestParseGitignore:
    def test_drops_comments_and_blank_lines(self):
        content = "# comment\n\nnode_modules\n   \n*.log\n"
        assert parse_gitignore_content(content) == ["node_modules", "*.log"]

    def test_strips_leading_and_trailing_slash(self):
        content = "/build/\ndist/\n/.env\n"
        assert parse_gitignore_content(content) == ["build", "dist", ".env"]

    def test_trims_whitespace_and_windows_line_endings(self):
        assert parse_gitignore_content("  coverage  \r\n.cache\r\n") == ["coverage", ".cache"]

    def test_negation_is_kept_literally(self):
        assert parse_gitignore_content("*.log\n!keep.log\n") == ["*.log", "!keep.log"]

    def test_empty_content(self):
        assert parse_gitignore_content("") == []
        assert parse_gitignore_content(None) == []

    @pytest.mark.parametrize(
        "content",
        [
            "/build/\n# c\nnode_modules\n*.pyc\n",
            "a//\n//b\n/\n / x / \n",
            "/#not-a-comment\nsrc/**/tmp\n",
        ],
    )
    def test_parse_is_idempotent(self, content):
        first = parse_gitignore_content(content)
        assert parse_gitignore_content("\n".join(first)) == first


class TestCustomPatterns:
    def test_split_on_commas_and_newlines(self):
        assert split_custom_patterns("docs, *.tmp\n**/backup/*,,\n") == [
            "docs",
            "*.tmp",
            "**/backup/*",
        ]

    def test_empty_input(self):
        assert split_custom_patterns("") == []
        assert split_custom_patterns(" , \n ") == []


class TestClassification:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("main.py", "py"),
            ("Archive.TAR.GZ", "gz"),
            ("Dockerfile", "dockerfile"),
            (".gitignore", "gitignore"),
        ],
    )
    def test_file_extension(self, name, expected):
        assert file_extension(name) == expected

    def test_text_files(self):
        assert is_text_file("app.tsx") is True
        assert is_text_file("Dockerfile") is True
        assert is_text_file("frontend.gitignore") is True
        assert is_text_file("logo.png") is False
        assert is_text_file("Makefile") is False

    def test_media_files(self):
        assert is_media_file("logo.PNG") is True
        assert is_media_file("font.woff2") is True
        assert is_media_file("report.pdf") is True
        assert is_media_file("main.py") is False
