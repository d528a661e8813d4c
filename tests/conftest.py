"""
Pytest configuration and shared fixtures.

Provides quiet runners and temporary superproject layouts used across the
test suite. Test doubles live in helpers.py.
"""

import pytest

from subpin.core.config import clear_cache
from subpin.core.vcs import IndexEntry, StepRunner

from helpers import (
    SHA_NEW,
    SHA_OLD,
    SHA_OTHER,
    FakeGateway,
    gitmodules,
    make_checkout,
    recording_console,
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user config, .env files and SUBPIN_* variables out of tests."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in (
        "SUBPIN_MANIFEST",
        "SUBPIN_BRANCHES",
        "SUBPIN_GIT",
        "SUBPIN_INSTALL",
        "SUBPIN_INSTALL_COMMAND",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def quiet_runner():
    """StepRunner writing to in-memory consoles."""
    return StepRunner(console=recording_console(), err_console=recording_console())


@pytest.fixture
def repo_root(tmp_path):
    """A superproject declaring lib/core, lib/ui and docs (nothing checked out)."""
    root = tmp_path / "app"
    root.mkdir()
    (root / ".gitmodules").write_text(gitmodules("lib/core", "lib/ui", "docs"))
    return root.resolve()


@pytest.fixture
def workspace(repo_root):
    """
    Superproject where lib/ui nests lib/core and docs does not.

    lib/core is checked out at SHA_NEW; lib/ui still pins lib/core at SHA_OLD.
    """
    make_checkout(repo_root, "lib/core")
    make_checkout(repo_root, "lib/ui", nested=("lib/core", "vendor/icons"))
    make_checkout(repo_root, "docs", nested=("vendor/theme",))
    return repo_root


@pytest.fixture
def fake_gateway(workspace):
    return FakeGateway(
        workspace,
        heads={"lib/core": SHA_NEW},
        indexes={
            "lib/ui": {"lib/core": IndexEntry(mode="160000", sha=SHA_OLD, path="lib/core")},
            "docs": {"vendor/theme": IndexEntry(mode="160000", sha=SHA_OTHER, path="vendor/theme")},
        },
    )
