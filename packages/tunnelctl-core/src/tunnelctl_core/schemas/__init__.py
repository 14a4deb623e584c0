"""Schema definitions for tunnelctl.

This module exports the core Pydantic models:

Root Models:
- TunnelSpec: Root schema for tunnels.yaml
- AcmeRegistrySpec: Root schema for acme.yaml

Instance Models:
- ServerInstance: wstunnel server declaration
- ClientInstance: wstunnel client declaration
- CommonInstanceConfig: Fields shared by both roles
- Endpoint: host:port pair
- CertificateRecord: ACME certificate directory and owning group
"""

from __future__ import annotations

from tunnelctl_core.schemas.acme import (
    DEFAULT_ACME_GROUP,
    DEFAULT_ACME_ROOT,
    AcmeRegistrySpec,
    CertificateRecord,
)
from tunnelctl_core.schemas.endpoint import MAX_PORT, MIN_PORT, Endpoint
from tunnelctl_core.schemas.instances import (
    DEFAULT_EXECUTABLE,
    DEFAULT_HTTP_PORT,
    DEFAULT_HTTPS_PORT,
    DEFAULT_LISTEN_HOST,
    ClientInstance,
    CommonInstanceConfig,
    ServerInstance,
)
from tunnelctl_core.schemas.tunnel_spec import INSTANCE_NAME_PATTERN, TunnelSpec

__all__ = [
    # Root models
    "TunnelSpec",
    "AcmeRegistrySpec",
    "INSTANCE_NAME_PATTERN",
    # Instances
    "CommonInstanceConfig",
    "ServerInstance",
    "ClientInstance",
    "DEFAULT_EXECUTABLE",
    "DEFAULT_LISTEN_HOST",
    "DEFAULT_HTTPS_PORT",
    "DEFAULT_HTTP_PORT",
    # Endpoint
    "Endpoint",
    "MIN_PORT",
    "MAX_PORT",
    # ACME
    "CertificateRecord",
    "DEFAULT_ACME_ROOT",
    "DEFAULT_ACME_GROUP",
]
