"""Compiler module for tunnelctl.

This module exports the Compiler class, its building blocks, and output models:
- Compiler: Main compiler class (TunnelSpec -> CompiledUnits)
- validate / ensure_valid: Global invariant checks
- derive_capabilities / derive_sandbox: Capability and sandbox derivation
- resolve_tls: TLS material resolution for servers
- build_command: Command line assembly with extra_args overlay
- AcmeRegistry / load_registry: Certificate-authority collaborator
- render_unit_file / write_unit_files: systemd unit rendering
- CompiledUnits / UnitDescriptor: Output contract models
"""

from __future__ import annotations

from tunnelctl_core.compiler.acme_resolver import (
    ACME_REGISTRY_ENV_VAR,
    ACME_REGISTRY_FILE_NAME,
    ACME_REGISTRY_SEARCH_PATHS,
    AcmeRegistry,
    CertificateAuthority,
    find_registry_file,
    load_registry,
)
from tunnelctl_core.compiler.capabilities import (
    UNPRIVILEGED_PORT_START,
    derive_capabilities,
    derive_client_capabilities,
    derive_sandbox,
    derive_server_capabilities,
)
from tunnelctl_core.compiler.command_builder import (
    build_client_command,
    build_command,
    build_server_command,
    client_flags,
    merge_overlay,
    render_flags,
    server_flags,
)
from tunnelctl_core.compiler.compiler import (
    CLIENT_UNIT_PREFIX,
    SERVER_UNIT_PREFIX,
    Compiler,
    client_unit_name,
    compute_source_hash,
    server_unit_name,
)
from tunnelctl_core.compiler.models import (
    DEFAULT_RESTART_POLICY,
    DEFAULT_SANDBOX,
    Capability,
    CompilationMetadata,
    CompiledUnits,
    RestartPolicy,
    SandboxProfile,
    UnitDescriptor,
)
from tunnelctl_core.compiler.tls import TlsMaterial, resolve_tls
from tunnelctl_core.compiler.unit_renderer import (
    quote_exec_argument,
    render_unit_file,
    write_unit_files,
)
from tunnelctl_core.compiler.validator import ValidationIssue, ensure_valid, validate

__all__: list[str] = [
    # Compiler class
    "Compiler",
    "server_unit_name",
    "client_unit_name",
    "compute_source_hash",
    "SERVER_UNIT_PREFIX",
    "CLIENT_UNIT_PREFIX",
    # Validation
    "validate",
    "ensure_valid",
    "ValidationIssue",
    # Capabilities
    "derive_capabilities",
    "derive_server_capabilities",
    "derive_client_capabilities",
    "derive_sandbox",
    "UNPRIVILEGED_PORT_START",
    # TLS
    "resolve_tls",
    "TlsMaterial",
    # Command line
    "build_command",
    "build_server_command",
    "build_client_command",
    "server_flags",
    "client_flags",
    "merge_overlay",
    "render_flags",
    # ACME registry
    "CertificateAuthority",
    "AcmeRegistry",
    "load_registry",
    "find_registry_file",
    "ACME_REGISTRY_ENV_VAR",
    "ACME_REGISTRY_FILE_NAME",
    "ACME_REGISTRY_SEARCH_PATHS",
    # Rendering
    "render_unit_file",
    "write_unit_files",
    "quote_exec_argument",
    # Output models
    "CompiledUnits",
    "CompilationMetadata",
    "UnitDescriptor",
    "RestartPolicy",
    "SandboxProfile",
    "Capability",
    "DEFAULT_RESTART_POLICY",
    "DEFAULT_SANDBOX",
]
