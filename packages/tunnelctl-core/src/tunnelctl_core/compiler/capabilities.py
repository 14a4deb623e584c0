"""Capability and sandbox derivation for tunnel units.

Units run as an unprivileged dynamic user. The only elevated rights ever
granted are:
- BIND_LOW_PORT: servers listening below port 1024, or clients that
  request it to bind low local ports
- NET_ADMIN: clients setting SO_MARK on their sockets
"""

from __future__ import annotations

from collections.abc import Iterable

from tunnelctl_core.compiler.models import DEFAULT_SANDBOX, Capability, SandboxProfile
from tunnelctl_core.schemas.instances import ClientInstance, ServerInstance

# First port that does not need CAP_NET_BIND_SERVICE
UNPRIVILEGED_PORT_START = 1024


def derive_server_capabilities(server: ServerInstance) -> frozenset[Capability]:
    """Capabilities needed by a server instance."""
    if server.listen.port < UNPRIVILEGED_PORT_START:
        return frozenset({Capability.BIND_LOW_PORT})
    return frozenset()


def derive_client_capabilities(client: ClientInstance) -> frozenset[Capability]:
    """Capabilities needed by a client instance."""
    capabilities: set[Capability] = set()
    if client.request_net_bind_capability:
        capabilities.add(Capability.BIND_LOW_PORT)
    if client.socket_mark is not None:
        capabilities.add(Capability.NET_ADMIN)
    return frozenset(capabilities)


def derive_capabilities(instance: ServerInstance | ClientInstance) -> frozenset[Capability]:
    """Capabilities needed by either kind of instance.

    Example:
        >>> derive_capabilities(ServerInstance(listen="0.0.0.0:443"))
        frozenset({<Capability.BIND_LOW_PORT: 'CAP_NET_BIND_SERVICE'>})
    """
    if isinstance(instance, ServerInstance):
        return derive_server_capabilities(instance)
    return derive_client_capabilities(instance)


def sorted_capabilities(capabilities: Iterable[Capability]) -> tuple[Capability, ...]:
    """Stable ordering used in descriptors."""
    return tuple(sorted(capabilities, key=lambda c: c.value))


def derive_sandbox(supplementary_groups: Iterable[str] = ()) -> SandboxProfile:
    """The fixed sandbox profile, plus any supplementary groups."""
    groups = tuple(dict.fromkeys(supplementary_groups))
    if not groups:
        return DEFAULT_SANDBOX
    return DEFAULT_SANDBOX.model_copy(update={"supplementary_groups": groups})
