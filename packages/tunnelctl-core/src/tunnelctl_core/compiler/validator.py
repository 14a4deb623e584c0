"""Global invariant checks for tunnel declarations.

These run over every declared instance, enabled or not, before any unit
is compiled. Schema-level checks (types, port ranges, names) are already
enforced by the pydantic models; this module covers the cross-field
rules between them.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from tunnelctl_core.errors import ConfigValidationError
from tunnelctl_core.schemas.instances import ClientInstance, ServerInstance

logger = logging.getLogger(__name__)

# Rule identifiers
RULE_ACME_EXCLUSIVE = "acme-exclusive"
RULE_TLS_PAIR = "tls-pair"
RULE_CLIENT_DIRECTION = "client-direction"


@dataclass(frozen=True)
class ValidationIssue:
    """A single violated rule.

    Attributes:
        role: "server" or "client".
        instance: Name of the offending instance.
        rule: Rule identifier (see RULE_* constants).
        message: Human-readable description.
    """

    role: Literal["server", "client"]
    instance: str
    rule: str
    message: str

    def __str__(self) -> str:
        return f"{self.role}s.{self.instance}: {self.message}"


def validate(
    servers: Mapping[str, ServerInstance],
    clients: Mapping[str, ClientInstance],
) -> list[ValidationIssue]:
    """Check the cross-field invariants of every instance.

    Args:
        servers: Server instances keyed by name.
        clients: Client instances keyed by name.

    Returns:
        List of issues, servers first, in declaration order. Empty if valid.

    Example:
        >>> issues = validate(spec.servers, spec.clients)
        >>> if issues:
        ...     print("\\n".join(str(i) for i in issues))
    """
    issues: list[ValidationIssue] = []

    for name, server in servers.items():
        if server.acme_host_name is not None and server.has_manual_tls:
            issues.append(
                ValidationIssue(
                    role="server",
                    instance=name,
                    rule=RULE_ACME_EXCLUSIVE,
                    message=(
                        "acme_host_name and tls_certificate_path/tls_key_path "
                        "are mutually exclusive"
                    ),
                )
            )

        if (server.tls_certificate_path is None) != (server.tls_key_path is None):
            issues.append(
                ValidationIssue(
                    role="server",
                    instance=name,
                    rule=RULE_TLS_PAIR,
                    message="tls_certificate_path and tls_key_path need to be set together",
                )
            )

    for name, client in clients.items():
        if not client.local_to_remote and not client.remote_to_local:
            issues.append(
                ValidationIssue(
                    role="client",
                    instance=name,
                    rule=RULE_CLIENT_DIRECTION,
                    message="either local_to_remote or remote_to_local must be set",
                )
            )

    logger.debug(
        "Validated %d server(s), %d client(s): %d issue(s)",
        len(servers),
        len(clients),
        len(issues),
    )
    return issues


def ensure_valid(
    servers: Mapping[str, ServerInstance],
    clients: Mapping[str, ClientInstance],
) -> None:
    """Raise if any invariant is violated.

    Raises:
        ConfigValidationError: Carrying every issue found.
    """
    issues = validate(servers, clients)
    if issues:
        raise ConfigValidationError(issues)
