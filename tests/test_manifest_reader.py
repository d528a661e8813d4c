"""
Unit tests for the manifest and branch override readers.
"""

import logging

import pytest

from subpin.core.manifest import (
    clean_module_name,
    parse_branches,
    parse_modules,
    read_branches,
    read_module_references,
    read_modules,
    read_text_or_default,
)

from helpers import gitmodules

# ==============================================================================
# clean_module_name
# ==============================================================================


class TestCleanModuleName:
    """Test identifier normalization."""

    def test_strips_trailing_slash(self):
        assert clean_module_name("lib/core/") == "lib/core"

    def test_unchanged_without_trailing_slash(self):
        assert clean_module_name("lib/core") == "lib/core"

    def test_strips_only_one_separator(self):
        assert clean_module_name("lib/core//") == "lib/core/"

    def test_none_stays_none(self):
        assert clean_module_name(None) is None

    def test_empty_string_stays_empty(self):
        """An empty name is not the same as no name."""
        assert clean_module_name("") == ""


# ==============================================================================
# read_text_or_default
# ==============================================================================


class TestReadTextOrDefault:
    """Test the tolerant file reader."""

    def test_reads_existing_file(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("hello\n")
        assert read_text_or_default(path) == "hello\n"

    def test_missing_file_returns_default(self, tmp_path):
        assert read_text_or_default(tmp_path / "missing", "fallback") == "fallback"

    def test_missing_file_logs_warning(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="subpin.core.manifest.reader"):
            read_text_or_default(tmp_path / "missing")
        assert "Could not read" in caplog.text

    def test_missing_file_quiet_when_warn_disabled(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="subpin.core.manifest.reader"):
            read_text_or_default(tmp_path / "missing", warn=False)
        assert caplog.text == ""

    def test_directory_returns_default(self, tmp_path):
        """Unreadable paths behave like missing ones."""
        assert read_text_or_default(tmp_path) == ""

    def test_invalid_utf8_returns_default(self, tmp_path):
        path = tmp_path / "binary"
        path.write_bytes(b"\xff\xfe\xfa")
        assert read_text_or_default(path, "x") == "x"


# ==============================================================================
# Module readers
# ==============================================================================


class TestReadModules:
    """Test module identifier extraction from .gitmodules."""

    def test_declaration_order(self, tmp_path):
        path = tmp_path / ".gitmodules"
        path.write_text(gitmodules("zeta", "alpha", "lib/mid"))
        assert read_modules(path) == ["zeta", "alpha", "lib/mid"]

    def test_missing_manifest_is_empty(self, tmp_path):
        assert read_modules(tmp_path / ".gitmodules") == []

    def test_empty_manifest_is_empty(self, tmp_path):
        path = tmp_path / ".gitmodules"
        path.write_text("")
        assert read_modules(path) == []

    def test_trailing_slash_in_header_is_normalized(self):
        content = '[submodule "lib/core/"]\n\tpath = lib/core\n'
        assert parse_modules(content) == ["lib/core"]

    def test_ignores_other_sections(self):
        content = '[core]\n\tbare = false\n[submodule "a"]\n\tpath = a\n'
        assert parse_modules(content) == ["a"]

    def test_header_without_line_break(self):
        """Sections are found anywhere in the text."""
        content = '[submodule "a"][submodule "b"]'
        assert parse_modules(content) == ["a", "b"]

    def test_does_not_check_paths(self, tmp_path):
        path = tmp_path / ".gitmodules"
        path.write_text(gitmodules("does/not/exist"))
        assert read_modules(path) == ["does/not/exist"]


class TestReadModuleReferences:
    """Test full section parsing via GitPython's config parser."""

    def test_reads_path_url_and_branch(self, tmp_path):
        path = tmp_path / ".gitmodules"
        path.write_text(
            '[submodule "lib/core"]\n'
            "\tpath = lib/core\n"
            "\turl = git@example.com:org/core.git\n"
            "\tbranch = main\n"
            '[submodule "docs"]\n'
            "\tpath = docs\n"
            "\turl = https://example.com/docs.git\n"
        )

        refs = read_module_references(path)

        assert [r.name for r in refs] == ["lib/core", "docs"]
        assert refs[0].path == "lib/core"
        assert refs[0].url == "git@example.com:org/core.git"
        assert refs[0].branch == "main"
        assert refs[1].branch is None

    def test_numeric_looking_path_stays_string(self, tmp_path):
        path = tmp_path / ".gitmodules"
        path.write_text('[submodule "2024"]\n\tpath = 2024\n')
        refs = read_module_references(path)
        assert refs[0].path == "2024"

    def test_missing_manifest_is_empty(self, tmp_path):
        assert read_module_references(tmp_path / ".gitmodules", warn=False) == []


# ==============================================================================
# Branch overrides
# ==============================================================================


class TestParseBranches:
    """Test .gitbranches parsing."""

    def test_module_branch_pairs(self):
        content = "lib/core develop\nlib/ui feature/login\n"
        assert parse_branches(content) == {"lib/core": "develop", "lib/ui": "feature/login"}

    @pytest.mark.parametrize(
        "content",
        [
            "",
            "\n\n",
            "# lib/core develop\n",
            "lib/core\n",
            "   \n",
        ],
    )
    def test_lines_without_override_are_skipped(self, content):
        assert parse_branches(content) == {}

    def test_extra_whitespace(self):
        assert parse_branches("  lib/core \t  develop  \n") == {"lib/core": "develop"}

    def test_trailing_slash_on_module(self):
        assert parse_branches("lib/core/ develop\n") == {"lib/core": "develop"}

    def test_last_line_wins(self):
        content = "lib/core develop\nlib/core release\n"
        assert parse_branches(content) == {"lib/core": "release"}

    def test_missing_file_is_silent(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            assert read_branches(tmp_path / ".gitbranches") == {}
        assert caplog.text == ""
