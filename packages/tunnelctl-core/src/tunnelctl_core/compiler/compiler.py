"""Compiler class for tunnelctl.

This module implements the Compiler that transforms a TunnelSpec
(tunnels.yaml) into CompiledUnits, the descriptors handed to the process
supervisor.

Compilation pipeline:
- Validate global invariants over every instance (fail fast, all issues)
- Skip disabled instances
- Resolve TLS material (servers) through the ACME collaborator
- Derive capabilities and the sandbox profile
- Build the command line (computed flags + extra_args overlay)
- Assemble environment, restart policy and boot behaviour

No descriptor is returned unless every enabled instance compiled.
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from pathlib import Path

import structlog

from tunnelctl_core.compiler.acme_resolver import AcmeRegistry, CertificateAuthority
from tunnelctl_core.compiler.capabilities import (
    derive_client_capabilities,
    derive_sandbox,
    derive_server_capabilities,
    sorted_capabilities,
)
from tunnelctl_core.compiler.command_builder import build_client_command, build_server_command
from tunnelctl_core.compiler.models import (
    BOOT_TARGET,
    DEFAULT_RESTART_POLICY,
    CompilationMetadata,
    CompiledUnits,
    UnitDescriptor,
)
from tunnelctl_core.compiler.tls import resolve_tls
from tunnelctl_core.compiler.validator import ensure_valid
from tunnelctl_core.schemas import ClientInstance, CommonInstanceConfig, ServerInstance, TunnelSpec

logger = structlog.get_logger(__name__)

# Package version - kept in sync with tunnelctl_core.__version__
TUNNELCTL_VERSION = "0.1.0"

# Unit name prefixes
SERVER_UNIT_PREFIX = "wstunnel-server-"
CLIENT_UNIT_PREFIX = "wstunnel-client-"

# Environment variable carrying log_level
LOG_LEVEL_ENV_VAR = "RUST_LOG"


def server_unit_name(name: str) -> str:
    return f"{SERVER_UNIT_PREFIX}{name}"


def client_unit_name(name: str) -> str:
    return f"{CLIENT_UNIT_PREFIX}{name}"


def compute_source_hash(content: str) -> str:
    """Compute the SHA-256 hash recorded as CompilationMetadata.source_hash."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class Compiler:
    """Compile tunnels.yaml into supervisor unit descriptors.

    The certificate-authority collaborator is injected so that tests can
    use a fake provider. Without one, an empty registry is used and any
    ACME reference fails.

    Example:
        >>> compiler = Compiler(AcmeRegistry.from_yaml(Path("acme.yaml")))
        >>> units = compiler.compile_file("tunnels.yaml")
        >>> units.units["wstunnel-client-wg-tunnel"].command
        ('wstunnel', 'client', '--local-to-remote', 'tcp://1212:google.com:443', ...)
    """

    def __init__(self, certificate_authority: CertificateAuthority | None = None) -> None:
        self.certificate_authority: CertificateAuthority = (
            certificate_authority if certificate_authority is not None else AcmeRegistry()
        )

    def compile(self, spec: TunnelSpec, *, source_hash: str | None = None) -> CompiledUnits:
        """Compile a validated-schema TunnelSpec into unit descriptors.

        Args:
            spec: The tunnel declarations.
            source_hash: Optional SHA-256 of the source file, recorded in metadata.

        Returns:
            Immutable CompiledUnits.

        Raises:
            ConfigValidationError: If any global invariant is violated.
            UnresolvedAcmeHostError: If a server's ACME host cannot be resolved.
            MalformedOverlayFlagError: If an extra_args value has an invalid type.
        """
        ensure_valid(spec.servers, spec.clients)

        units: dict[str, UnitDescriptor] = {}
        if spec.enabled:
            for name, server in spec.servers.items():
                if server.enabled:
                    unit = self.compile_server(name, server)
                    units[unit.name] = unit
            for name, client in spec.clients.items():
                if client.enabled:
                    unit = self.compile_client(name, client)
                    units[unit.name] = unit
        else:
            logger.info("tunnels_disabled", servers=len(spec.servers), clients=len(spec.clients))

        logger.info("compilation_complete", units=len(units))
        return CompiledUnits(
            metadata=CompilationMetadata(
                compiled_at=datetime.now(timezone.utc),
                tunnelctl_version=TUNNELCTL_VERSION,
                source_hash=source_hash,
            ),
            units=units,
        )

    def compile_file(self, spec_path: Path | str) -> CompiledUnits:
        """Load tunnels.yaml and compile it.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            yaml.YAMLError: If YAML is invalid.
            pydantic.ValidationError: If schema validation fails.
        """
        spec_path = Path(spec_path)
        if not spec_path.exists():
            raise FileNotFoundError(f"File not found: {spec_path}")

        source_hash = compute_source_hash(spec_path.read_text())
        spec = TunnelSpec.from_yaml(spec_path)
        return self.compile(spec, source_hash=source_hash)

    def compile_server(self, name: str, server: ServerInstance) -> UnitDescriptor:
        """Compile one server instance. Assumes global validation passed."""
        tls = resolve_tls(name, server, self.certificate_authority) if server.use_https else None
        groups = [tls.group] if tls is not None and tls.group is not None else []

        unit = UnitDescriptor(
            name=server_unit_name(name),
            description=f"wstunnel server - {name}",
            command=build_server_command(server, tls),
            capabilities=sorted_capabilities(derive_server_capabilities(server)),
            sandbox=derive_sandbox(groups),
            **self._common_fields(server),
        )
        logger.debug(
            "unit_compiled",
            unit=unit.name,
            capabilities=[c.name for c in unit.capabilities],
        )
        return unit

    def compile_client(self, name: str, client: ClientInstance) -> UnitDescriptor:
        """Compile one client instance. Assumes global validation passed."""
        unit = UnitDescriptor(
            name=client_unit_name(name),
            description=f"wstunnel client - {name}",
            command=build_client_command(client),
            capabilities=sorted_capabilities(derive_client_capabilities(client)),
            sandbox=derive_sandbox(),
            **self._common_fields(client),
        )
        logger.debug(
            "unit_compiled",
            unit=unit.name,
            capabilities=[c.name for c in unit.capabilities],
        )
        return unit

    def _common_fields(self, instance: CommonInstanceConfig) -> dict[str, object]:
        """Environment, restart policy and boot wiring shared by both roles."""
        environment: dict[str, str] = {}
        if instance.log_level is not None:
            environment[LOG_LEVEL_ENV_VAR] = instance.log_level

        environment_files = (
            (instance.environment_file,) if instance.environment_file is not None else ()
        )

        return {
            "environment": environment,
            "environment_files": environment_files,
            "restart_policy": DEFAULT_RESTART_POLICY,
            "start_on_boot": instance.auto_start,
            "wanted_by": (BOOT_TARGET,) if instance.auto_start else (),
        }
