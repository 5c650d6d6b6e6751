"""
Pytest configuration for the Crowbar test suite.

This conftest.py provides:
- Machine-mode logging (suppresses console output)
- An isolated project directory per test (config, backups, paths)
- Fixtures for the sample Rust sources
"""

import os
import shutil
from pathlib import Path

import pytest

from crowbar.cli.config import CLIConfig
from crowbar.logging_config import setup_logging
from crowbar.mutation import facade as mutation_facade
from crowbar.paths import CrowbarPaths, reset_paths
from crowbar.user_config import reset_user_config

TEST_FILES_DIR = Path(__file__).parent / "test_files"


# ============================================================================
# GLOBAL CONFIGURATION
# ============================================================================

def pytest_configure(config):
    """Keep console output machine-friendly."""
    os.environ.setdefault("CROWBAR_MACHINE_MODE", "1")


# ============================================================================
# LOGGING FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def setup_test_logging():
    """
    Machine mode by default - suppress console logs for clean test output.
    """
    setup_logging(level="DEBUG", suppress_console=True)


# ============================================================================
# ISOLATION
# ============================================================================

@pytest.fixture(autouse=True)
def isolated_project(tmp_path, monkeypatch):
    """
    Run every test inside its own project directory with no global config,
    so .crowbar/ files never land in the repository or the home directory.
    """
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    monkeypatch.setattr(CrowbarPaths, "GLOBAL_DIR", tmp_path / "global")
    monkeypatch.delenv("CROWBAR_HUMAN_MODE", raising=False)
    monkeypatch.setattr(mutation_facade, "_default_facade", None)
    reset_paths()
    reset_user_config()
    CLIConfig.reset()
    yield project
    reset_paths()
    reset_user_config()
    CLIConfig.reset()


# ============================================================================
# SOURCE FIXTURES
# ============================================================================

@pytest.fixture
def sample_path():
    return TEST_FILES_DIR / "sample.rs"


@pytest.fixture
def sample_text(sample_path):
    with open(sample_path, "r", encoding="utf-8", newline="") as f:
        return f.read()


@pytest.fixture
def sample_copy(isolated_project, sample_path):
    """A writable copy of sample.rs inside the project directory."""
    target = isolated_project / "sample.rs"
    shutil.copyfile(sample_path, target)
    return target


@pytest.fixture
def make_source(isolated_project):
    """
    Factory writing text byte-exact (no newline translation) into the
    project directory.

    Usage:
        def test_something(make_source):
            path = make_source("fn main() {}\n", name="main.rs")
    """
    def _make(text: str, name: str = "main.rs") -> Path:
        path = isolated_project / name
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        return path

    return _make
