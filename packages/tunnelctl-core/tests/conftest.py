"""Shared pytest fixtures for tunnelctl-core tests.

This module provides common fixtures used across unit, integration,
and contract tests.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest
import structlog

from tunnelctl_core.compiler.acme_resolver import AcmeRegistry
from tunnelctl_core.errors import UnresolvedAcmeHostError
from tunnelctl_core.schemas.acme import CertificateRecord


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    Without this, structlog may use different processors depending on
    test execution order.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


class FakeCertificateAuthority:
    """In-test certificate-authority provider that records lookups."""

    def __init__(self, records: dict[str, CertificateRecord]) -> None:
        self.records = records
        self.lookups: list[str] = []

    def lookup(self, host_name: str) -> CertificateRecord:
        self.lookups.append(host_name)
        if host_name not in self.records:
            raise UnresolvedAcmeHostError(host_name, available_hosts=list(self.records))
        return self.records[host_name]


@pytest.fixture
def fake_ca() -> FakeCertificateAuthority:
    """Provider knowing a single host, example.com."""
    return FakeCertificateAuthority(
        {
            "example.com": CertificateRecord(
                directory="/var/lib/acme/example.com",
                group="acme",
            )
        }
    )


@pytest.fixture
def acme_registry() -> AcmeRegistry:
    return AcmeRegistry(
        {"example.com": CertificateRecord(directory="/var/lib/acme/example.com", group="nginx")}
    )


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_tunnels_yaml() -> dict[str, Any]:
    """Return a tunnels.yaml document with one server and one client.

    Returns:
        Dictionary representing a valid tunnels.yaml structure.
    """
    return {
        "servers": {
            "wg-tunnel": {
                "listen": {"host": "0.0.0.0", "port": 8080},
                "use_https": True,
                "tls_certificate_path": "/var/lib/secrets/fullchain.pem",
                "tls_key_path": "/var/lib/secrets/key.pem",
                "restrict_to": [{"host": "127.0.0.1", "port": 51820}],
            }
        },
        "clients": {
            "wg-tunnel": {
                "connect_target": "wss://wstunnel.server.com:8443",
                "local_to_remote": [
                    "tcp://1212:google.com:443",
                    "tcp://2:n.lan:4?proxy_protocol",
                ],
                "remote_to_local": [
                    "socks5://[::1]:1212",
                    "unix://wstunnel.sock:g.com:443",
                ],
            }
        },
    }
