"""Compiler output models for tunnelctl.

This module defines the output contract produced by the Compiler and
consumed by the process supervisor:
- UnitDescriptor: one supervised process (command, environment, policy)
- RestartPolicy: bounded-backoff restart settings
- SandboxProfile: filesystem/namespace/device restrictions
- CompiledUnits: all descriptors of one compilation run plus metadata

Version History:
- v1.0.0: Initial release
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Contract version of CompiledUnits
COMPILED_UNITS_VERSION = "1.0.0"

# Ordering dependencies of every unit
NETWORK_TARGETS = ("network.target", "network-online.target")

# Install target of units started on boot
BOOT_TARGET = "multi-user.target"


class Capability(str, Enum):
    """Elevated OS capabilities a unit may be granted.

    Member names are the logical tokens; values are the Linux capability
    names the supervisor understands.
    """

    BIND_LOW_PORT = "CAP_NET_BIND_SERVICE"
    NET_ADMIN = "CAP_NET_ADMIN"


class RestartPolicy(BaseModel):
    """Restart-on-failure with stepped backoff.

    The delay starts at ``initial_delay_seconds`` and grows over ``steps``
    restarts up to ``max_delay_seconds``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    restart: Literal["on-failure"] = Field(
        default="on-failure",
        description="When the supervisor restarts the process",
    )
    initial_delay_seconds: int = Field(
        default=2,
        ge=0,
        description="Delay before the first restart",
    )
    steps: int = Field(
        default=20,
        ge=0,
        description="Number of restarts over which the delay grows",
    )
    max_delay_seconds: int = Field(
        default=300,
        ge=0,
        description="Upper bound of the restart delay",
    )


class SandboxProfile(BaseModel):
    """Process sandbox applied to every unit.

    Everything except ``supplementary_groups`` is fixed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    dynamic_user: bool = True
    private_tmp: bool = True
    no_new_privileges: bool = True
    restrict_namespaces: str = "uts ipc pid user cgroup"
    protect_system: Literal["strict"] = "strict"
    protect_home: bool = True
    protect_kernel_tunables: bool = True
    protect_kernel_modules: bool = True
    protect_control_groups: bool = True
    private_devices: bool = True
    restrict_suid_sgid: bool = True
    supplementary_groups: tuple[str, ...] = Field(
        default=(),
        description="Extra groups, e.g. the owner group of ACME certificates",
    )


# Shared constants
DEFAULT_RESTART_POLICY = RestartPolicy()
DEFAULT_SANDBOX = SandboxProfile()


class UnitDescriptor(BaseModel):
    """A compiled, supervisor-ready process description.

    Attributes:
        name: Unit name (``wstunnel-server-<name>`` / ``wstunnel-client-<name>``).
        description: Human-readable description.
        command: Executable followed by its arguments.
        environment: Explicit environment variables.
        environment_files: KEY=VALUE files the supervisor merges in.
        restart_policy: Restart behaviour (identical for every unit).
        capabilities: Granted capabilities, sorted by value.
        sandbox: Sandbox restrictions.
        start_on_boot: Whether the unit is started at boot.
        service_type: Supervisor start-up notification type.
        requires: Units this one requires.
        after: Units this one is ordered after.
        wanted_by: Install targets (empty unless started on boot).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1)
    description: str
    command: tuple[str, ...] = Field(..., min_length=1)
    environment: dict[str, str] = Field(default_factory=dict)
    environment_files: tuple[str, ...] = ()
    restart_policy: RestartPolicy = DEFAULT_RESTART_POLICY
    capabilities: tuple[Capability, ...] = ()
    sandbox: SandboxProfile = DEFAULT_SANDBOX
    start_on_boot: bool = True
    service_type: Literal["exec"] = "exec"
    requires: tuple[str, ...] = NETWORK_TARGETS
    after: tuple[str, ...] = NETWORK_TARGETS
    wanted_by: tuple[str, ...] = ()


class CompilationMetadata(BaseModel):
    """Provenance of a compilation run.

    Attributes:
        compiled_at: Timestamp when compilation occurred (UTC).
        tunnelctl_version: Version of tunnelctl-core that produced the units.
        source_hash: SHA-256 of the source tunnels.yaml, when compiled from a file.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    compiled_at: datetime
    tunnelctl_version: str = Field(..., min_length=1)
    source_hash: str | None = None


class CompiledUnits(BaseModel):
    """Immutable output of one compilation run.

    Contract Rules:
    - Model is immutable (frozen=True)
    - Unknown fields are rejected (extra="forbid")
    - Units are keyed by unit name; servers first, then clients, each in
      declaration order
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str = Field(
        default=COMPILED_UNITS_VERSION,
        description="Contract version (semver)",
    )
    metadata: CompilationMetadata
    units: dict[str, UnitDescriptor] = Field(default_factory=dict)
