"""tunnelctl-core: Compile wstunnel declarations into supervised units.

This package provides:
- TunnelSpec: Pydantic schema for tunnels.yaml
- Compiler: Transform TunnelSpec -> CompiledUnits
- CompiledUnits / UnitDescriptor: Output contract for the process supervisor
- systemd unit rendering and JSON Schema export utilities
"""

from __future__ import annotations

__version__ = "0.1.0"

# Compiler and output models
from tunnelctl_core.compiler import (
    AcmeRegistry,
    Capability,
    CertificateAuthority,
    CompiledUnits,
    Compiler,
    RestartPolicy,
    SandboxProfile,
    UnitDescriptor,
    ValidationIssue,
    compute_source_hash,
    load_registry,
    render_unit_file,
    validate,
    write_unit_files,
)

# Error types
from tunnelctl_core.errors import (
    ConfigurationError,
    ConfigValidationError,
    MalformedOverlayFlagError,
    TunnelError,
    UnresolvedAcmeHostError,
)

# JSON Schema export functions
from tunnelctl_core.export import (
    export_compiled_units_schema,
    export_tunnel_spec_schema,
)

# Schema models
from tunnelctl_core.schemas import (
    CertificateRecord,
    ClientInstance,
    Endpoint,
    ServerInstance,
    TunnelSpec,
)

# Credential scan
from tunnelctl_core.security import CredentialWarning, find_inline_credentials

__all__ = [
    "__version__",
    # Compiler
    "Compiler",
    "compute_source_hash",
    "CompiledUnits",
    "UnitDescriptor",
    "RestartPolicy",
    "SandboxProfile",
    "Capability",
    "ValidationIssue",
    "validate",
    "render_unit_file",
    "write_unit_files",
    # ACME collaborator
    "CertificateAuthority",
    "AcmeRegistry",
    "load_registry",
    # Errors
    "TunnelError",
    "ConfigValidationError",
    "UnresolvedAcmeHostError",
    "MalformedOverlayFlagError",
    "ConfigurationError",
    # JSON Schema exports
    "export_tunnel_spec_schema",
    "export_compiled_units_schema",
    # Schema models
    "TunnelSpec",
    "ServerInstance",
    "ClientInstance",
    "Endpoint",
    "CertificateRecord",
    # Security
    "CredentialWarning",
    "find_inline_credentials",
]
