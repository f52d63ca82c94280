"""Pytest configuration and fixtures."""

import os
from pathlib import Path

import pytest

from mintdb.config import reset_settings

# Import CLI fixtures to make them available globally
from tests.cli_fixtures import clean_runner  # noqa: F401


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test",
    )
    config.addinivalue_line(
        "markers",
        "unit: mark test as unit test",
    )


def _clear_mintdb_environment() -> None:
    for key in [key for key in os.environ if key.startswith("MINTDB_")]:
        del os.environ[key]


@pytest.fixture(autouse=True)
def cleanup_singletons():
    """Ensure singletons are cleaned up between tests to prevent contamination."""
    yield

    # Clean up connection manager after each test to prevent cross-test contamination
    from mintdb.database.connection_manager import close_connection_manager

    close_connection_manager()
    reset_settings()


@pytest.fixture(autouse=True)
def isolated_test_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Run every test without MINTDB_* variables or a stray .env file.

    ``configure()`` writes straight to ``os.environ``, so the variables are
    cleared again after the test rather than relying on monkeypatch alone.
    """
    _clear_mintdb_environment()
    monkeypatch.chdir(tmp_path)
    reset_settings()

    yield

    _clear_mintdb_environment()


@pytest.fixture
def sqlite_file(tmp_path: Path) -> Path:
    """Path to a SQLite database file inside the test's temp directory."""
    return tmp_path / "mintdb_test.sqlite"
