"""Unit tests for TLS material resolution."""

from __future__ import annotations

from typing import Any

import pytest

from tunnelctl_core.compiler.tls import TlsMaterial, resolve_tls
from tunnelctl_core.errors import UnresolvedAcmeHostError
from tunnelctl_core.schemas.instances import ServerInstance


class TestResolveTls:
    """Tests for resolve_tls()."""

    def test_acme_host(self, fake_ca: Any) -> None:
        """ACME hosts resolve to the record's files and group."""
        material = resolve_tls("edge", ServerInstance(acme_host_name="example.com"), fake_ca)
        assert material == TlsMaterial(
            certificate_path="/var/lib/acme/example.com/fullchain.pem",
            key_path="/var/lib/acme/example.com/key.pem",
            group="acme",
        )
        assert fake_ca.lookups == ["example.com"]

    def test_manual_pair(self, fake_ca: Any) -> None:
        """A manual pair is used as is, without a group."""
        server = ServerInstance(tls_certificate_path="/c.pem", tls_key_path="/k.pem")
        assert resolve_tls("edge", server, fake_ca) == TlsMaterial("/c.pem", "/k.pem")
        assert fake_ca.lookups == []

    def test_no_material(self, fake_ca: Any) -> None:
        """Without ACME or a pair, wstunnel's built-in certificate is used."""
        assert resolve_tls("edge", ServerInstance(), fake_ca) is None

    def test_unknown_acme_host(self, fake_ca: Any) -> None:
        """Unknown hosts raise with the instance name attached."""
        with pytest.raises(UnresolvedAcmeHostError) as exc_info:
            resolve_tls("edge", ServerInstance(acme_host_name="unknown.org"), fake_ca)

        err = exc_info.value
        assert err.host_name == "unknown.org"
        assert err.instance == "edge"
        assert err.available_hosts == ["example.com"]
        assert "Server 'edge'" in str(err)
