"""Tunnel instance models for tunnelctl.

This module defines the two instance roles declared in tunnels.yaml:
- ServerInstance: a wstunnel server accepting websocket upgrades
- ClientInstance: a wstunnel client connecting to a server

Both share the fields of CommonInstanceConfig. Instances are immutable
snapshots; effective defaults (such as the listen port, which depends on
use_https) are resolved once at construction time.
"""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from tunnelctl_core.schemas.endpoint import Endpoint

# Executable looked up on PATH when no explicit path is configured
DEFAULT_EXECUTABLE = "wstunnel"

# Listen defaults for servers
DEFAULT_LISTEN_HOST = "0.0.0.0"
DEFAULT_HTTPS_PORT = 443
DEFAULT_HTTP_PORT = 80

# Same coercion pydantic applies to the use_https field
_BOOL_ADAPTER: TypeAdapter[bool] = TypeAdapter(bool)


class CommonInstanceConfig(BaseModel):
    """Fields shared by server and client instances.

    Attributes:
        enabled: Whether this instance is compiled into a unit at all.
        auto_start: Whether the unit is started on boot.
        executable_path: The wstunnel binary to invoke.
        extra_args: Flag overlay merged onto computed flags. ``True`` becomes
            a bare ``--flag``, a string becomes ``--flag value``, ``False``
            removes the flag.
        ping_interval_seconds: Websocket ping interval. Unset when None.
        log_level: Exported to the process as RUST_LOG when set.
        environment_file: KEY=VALUE file loaded by the supervisor. Never read
            by tunnelctl.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(
        default=True,
        description="Whether this instance participates in compilation",
    )
    auto_start: bool = Field(
        default=True,
        description="Start the unit on boot",
    )
    executable_path: str = Field(
        default=DEFAULT_EXECUTABLE,
        min_length=1,
        description="Path to the wstunnel executable",
    )
    extra_args: dict[str, StrictBool | StrictStr] = Field(
        default_factory=dict,
        description="Extra command line flags, overriding computed ones",
    )
    ping_interval_seconds: int | None = Field(
        default=None,
        ge=0,
        description="Interval between websocket pings (seconds)",
    )
    log_level: str | None = Field(
        default=None,
        description="Log filter passed through RUST_LOG (e.g. INFO, DEBUG)",
    )
    environment_file: str | None = Field(
        default=None,
        description="Environment file loaded by the supervisor",
    )

    @field_validator("environment_file")
    @classmethod
    def reject_control_characters(cls, v: str | None) -> str | None:
        """Keep the path on a single EnvironmentFile= line."""
        if v is not None and any(ord(char) < 0x20 or ord(char) == 0x7F for char in v):
            raise ValueError("environment_file must not contain control characters")
        return v


class ServerInstance(CommonInstanceConfig):
    """A wstunnel server instance.

    Either a manual certificate pair or an ACME host may supply TLS
    material; when neither is set wstunnel falls back to its built-in
    self-signed certificate.

    Example:
        >>> server = ServerInstance(
        ...     listen={"host": "0.0.0.0", "port": 8080},
        ...     tls_certificate_path="/var/lib/secrets/cert.pem",
        ...     tls_key_path="/var/lib/secrets/key.pem",
        ...     restrict_to=[{"host": "127.0.0.1", "port": 51820}],
        ... )
        >>> ServerInstance(use_https=False).listen.port
        80
    """

    listen: Endpoint = Field(
        default_factory=lambda: Endpoint(host=DEFAULT_LISTEN_HOST, port=DEFAULT_HTTPS_PORT),
        description="Address to listen on. Ports below 1024 grant CAP_NET_BIND_SERVICE",
    )
    restrict_to: list[Endpoint] = Field(
        default_factory=list,
        description="Forward accepted traffic only to these targets",
    )
    use_https: bool = Field(
        default=True,
        description="Serve the tunnel over TLS (wss://)",
    )
    tls_certificate_path: str | None = Field(
        default=None,
        description="TLS certificate, used together with tls_key_path",
    )
    tls_key_path: str | None = Field(
        default=None,
        description="TLS private key, used together with tls_certificate_path",
    )
    acme_host_name: str | None = Field(
        default=None,
        min_length=1,
        description="Use the ACME-managed certificate of this host",
    )

    @model_validator(mode="before")
    @classmethod
    def default_listen_from_scheme(cls, data: Any) -> Any:
        """Default the listen port to 443 with HTTPS and 80 without."""
        if not isinstance(data, dict) or data.get("listen") is not None:
            return data

        try:
            use_https = _BOOL_ADAPTER.validate_python(data.get("use_https", True))
        except ValidationError:
            # Reported by field validation
            return data
        port = DEFAULT_HTTPS_PORT if use_https else DEFAULT_HTTP_PORT
        return {**data, "listen": {"host": DEFAULT_LISTEN_HOST, "port": port}}

    @property
    def has_manual_tls(self) -> bool:
        """Whether any part of the manual certificate pair is set."""
        return self.tls_certificate_path is not None or self.tls_key_path is not None

    @property
    def scheme(self) -> str:
        """URL scheme of the listen endpoint."""
        return "wss" if self.use_https else "ws"


class ClientInstance(CommonInstanceConfig):
    """A wstunnel client instance.

    Tunnel specs in local_to_remote and remote_to_local are passed through
    to wstunnel untouched.

    Example:
        >>> client = ClientInstance(
        ...     connect_target="wss://wstunnel.example.com:8443",
        ...     local_to_remote=["tcp://1212:google.com:443"],
        ... )
    """

    connect_target: str = Field(
        ...,
        min_length=1,
        description="Server URL to connect to",
    )
    local_to_remote: list[str] = Field(
        default_factory=list,
        description="Listen locally and forward to the remote side",
    )
    remote_to_local: list[str] = Field(
        default_factory=list,
        description="Listen on the remote side and forward locally",
    )
    request_net_bind_capability: bool = Field(
        default=False,
        description="Grant CAP_NET_BIND_SERVICE to bind local ports below 1024",
    )
    proxy: str | None = Field(
        default=None,
        description="HTTP proxy (USER:PASS@HOST:PORT) to reach the server",
    )
    socket_mark: int | None = Field(
        default=None,
        ge=0,
        description="SO_MARK applied to tunnel sockets. Grants CAP_NET_ADMIN",
    )
    upgrade_path_prefix: str | None = Field(
        default=None,
        description="HTTP path prefix of the upgrade request",
    )
    tls_server_name_override: str | None = Field(
        default=None,
        description="SNI sent during the TLS handshake",
    )
    tls_verify_certificate: bool = Field(
        default=True,
        description="Verify the server certificate",
    )
    upgrade_credentials: str | None = Field(
        default=None,
        description="Basic auth credentials (USER:[PASS]) for the upgrade request",
    )
    custom_headers: dict[str, str] = Field(
        default_factory=dict,
        description="Extra HTTP headers sent with the upgrade request",
    )
