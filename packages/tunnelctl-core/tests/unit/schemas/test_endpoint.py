"""Unit tests for the Endpoint model."""

from __future__ import annotations

from pydantic import ValidationError
import pytest

from tunnelctl_core.schemas.endpoint import MAX_PORT, Endpoint


class TestEndpoint:
    """Tests for host/port parsing and rendering."""

    def test_mapping_form(self) -> None:
        """Endpoint accepts host and port fields."""
        endpoint = Endpoint(host="127.0.0.1", port=51820)
        assert endpoint.host == "127.0.0.1"
        assert endpoint.port == 51820

    def test_string_form(self) -> None:
        """Endpoint accepts 'host:port' strings."""
        endpoint = Endpoint.model_validate("wstunnel.example.com:8443")
        assert endpoint == Endpoint(host="wstunnel.example.com", port=8443)

    def test_string_form_splits_at_last_colon(self) -> None:
        """IPv6 hosts keep their inner colons."""
        endpoint = Endpoint.model_validate("[::1]:51820")
        assert endpoint.host == "[::1]"
        assert endpoint.port == 51820

    def test_str_renders_host_port(self) -> None:
        """str() produces the command line form."""
        assert str(Endpoint(host="0.0.0.0", port=443)) == "0.0.0.0:443"

    def test_string_without_port_rejected(self) -> None:
        """A bare host is not a valid endpoint."""
        with pytest.raises(ValidationError, match="Expected 'host:port'"):
            Endpoint.model_validate("localhost")

    def test_empty_host_rejected(self) -> None:
        """':80' has no host."""
        with pytest.raises(ValidationError):
            Endpoint.model_validate(":80")

    @pytest.mark.parametrize("port", [-1, MAX_PORT + 1])
    def test_port_out_of_range_rejected(self, port: int) -> None:
        """Ports outside 0-65535 are rejected."""
        with pytest.raises(ValidationError):
            Endpoint(host="localhost", port=port)

    def test_boundary_ports_accepted(self) -> None:
        """0 and 65535 are valid ports."""
        assert Endpoint(host="h", port=0).port == 0
        assert Endpoint(host="h", port=MAX_PORT).port == MAX_PORT

    def test_endpoint_is_frozen(self) -> None:
        """Endpoints are immutable."""
        endpoint = Endpoint(host="h", port=1)
        with pytest.raises(ValidationError):
            endpoint.port = 2  # type: ignore[misc]

    def test_unknown_field_rejected(self) -> None:
        """extra='forbid' rejects typos."""
        with pytest.raises(ValidationError):
            Endpoint(host="h", port=1, proto="tcp")  # type: ignore[call-arg]
