"""Shared test fixtures for spectry.

Provides reusable fixtures for loading spec fixtures, parsing documents,
creating isolated config environments, managing output state, and running
CLI commands. These fixtures are automatically discovered by pytest.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from spectry.output import OutputFormat, OutputManager, reset_output, set_output
from spectry.parser import SpecDocument, parse

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Raw spec text fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_text() -> str:
    """Petstore OpenAPI 3.0 spec as YAML text."""
    return (FIXTURES_DIR / "petstore.yaml").read_text(encoding="utf-8")


@pytest.fixture
def swagger_text() -> str:
    """Petstore Swagger 2.0 spec as JSON text."""
    return (FIXTURES_DIR / "petstore_swagger.json").read_text(encoding="utf-8")


@pytest.fixture
def petstore_path(tmp_path: Path, petstore_text: str) -> Path:
    """The petstore YAML copied into tmp_path."""
    path = tmp_path / "petstore.yaml"
    path.write_text(petstore_text, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Parsed document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_doc(petstore_text: str) -> SpecDocument:
    """Parsed petstore 3.0 document."""
    return parse(petstore_text)


@pytest.fixture
def swagger_doc(swagger_text: str) -> SpecDocument:
    """Parsed petstore Swagger 2.0 document."""
    return parse(swagger_text)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user config, clears all SPECTRY_* variables,
    and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))

    for var in ["SPECTRY_SERVER", "SPECTRY_TIMEOUT"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def plain_output() -> OutputManager:
    """Install a PLAIN-format, colourless OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager for the test."""
    output = OutputManager(format=OutputFormat.JSON, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
