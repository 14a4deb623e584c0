"""Shared test fixtures for tunnelctl-cli tests.

Provides CliRunner fixtures and copies of the tunnels.yaml / acme.yaml
fixtures in temporary directories.
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

from click.testing import CliRunner
import pytest
import structlog

from tunnelctl_core.compiler.acme_resolver import ACME_REGISTRY_ENV_VAR
from tunnelctl_core.observability import LOG_LEVEL_ENV_VAR, configure_logging

# File name constants
TUNNELS_YAML_FILENAME = "tunnels.yaml"
ACME_YAML_FILENAME = "acme.yaml"


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep host configuration and log output out of command results."""
    monkeypatch.delenv(ACME_REGISTRY_ENV_VAR, raising=False)
    monkeypatch.delenv(LOG_LEVEL_ENV_VAR, raising=False)
    configure_logging(log_level="WARNING")
    yield
    structlog.reset_defaults()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner.

    Returns:
        CliRunner instance for testing CLI commands.
    """
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    Yields:
        CliRunner instance with isolated filesystem.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def valid_tunnels_yaml(fixtures_dir: Path, tmp_path: Path) -> Path:
    """Return a valid tunnels.yaml in tmp_path.

    One of its servers uses the ACME host example.com; pass
    ``acme_yaml`` via --acme-registry to compile it.
    """
    dst = tmp_path / TUNNELS_YAML_FILENAME
    dst.write_text((fixtures_dir / "valid_tunnels.yaml").read_text())
    return dst


@pytest.fixture
def invalid_tunnels_yaml(fixtures_dir: Path, tmp_path: Path) -> Path:
    """Return a tunnels.yaml violating the TLS pair and client direction rules."""
    dst = tmp_path / TUNNELS_YAML_FILENAME
    dst.write_text((fixtures_dir / "invalid_tunnels.yaml").read_text())
    return dst


@pytest.fixture
def acme_yaml(fixtures_dir: Path, tmp_path: Path) -> Path:
    """Return an acme.yaml knowing example.com (group nginx)."""
    dst = tmp_path / ACME_YAML_FILENAME
    dst.write_text((fixtures_dir / ACME_YAML_FILENAME).read_text())
    return dst
