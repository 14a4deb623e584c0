"""Custom exception hierarchy for tunnelctl-core.

This module defines the exception classes raised while compiling
tunnel declarations into supervised units:
- TunnelError: Base exception for all tunnelctl errors
- ConfigValidationError: One or more config invariants are violated
- UnresolvedAcmeHostError: A server references an unmanaged ACME host
- MalformedOverlayFlagError: An extra_args value has an unsupported type
- ConfigurationError: A config or registry file cannot be loaded

User-facing messages are safe to display. Technical details are logged
internally via structlog and never shown to the operator.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from tunnelctl_core.compiler.validator import ValidationIssue

logger = structlog.get_logger(__name__)


class TunnelError(Exception):
    """Base exception for tunnelctl.

    Args:
        user_message: Safe message to display to the operator.
        internal_details: Optional technical details. Logged internally,
            never part of the exception message.

    Example:
        >>> raise TunnelError(
        ...     "Configuration invalid",
        ...     internal_details="servers.edge.listen.port: 70000 > 65535",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "tunnel_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ConfigValidationError(TunnelError):
    """Raised when global config invariants are violated.

    Carries every failing check so the operator sees all problems at
    once. Compilation never proceeds partially once this is raised.

    Attributes:
        issues: The individual validation failures, in check order.

    Example:
        >>> raise ConfigValidationError([issue])
        # User sees:
        # "Tunnel configuration is invalid (1 problem):
        #   - servers.edge: tls_certificate_path and tls_key_path need to be set together"
    """

    def __init__(
        self,
        issues: list[ValidationIssue],
        *,
        internal_details: str | None = None,
    ) -> None:
        count = len(issues)
        noun = "problem" if count == 1 else "problems"
        lines = [f"Tunnel configuration is invalid ({count} {noun}):"]
        lines.extend(f"  - {issue}" for issue in issues)

        super().__init__("\n".join(lines), internal_details=internal_details)

        self.issues = list(issues)


class UnresolvedAcmeHostError(TunnelError):
    """Raised when a server's ACME host has no certificate-authority record.

    Attributes:
        host_name: The ACME host that could not be resolved.
        instance: Name of the server instance referencing it, when known.
        available_hosts: Hosts the registry does know about.
    """

    def __init__(
        self,
        host_name: str,
        *,
        instance: str | None = None,
        available_hosts: list[str] | None = None,
        internal_details: str | None = None,
    ) -> None:
        available = available_hosts or []
        available_str = ", ".join(available) if available else "none"
        if instance is not None:
            user_message = (
                f"Server '{instance}' uses ACME host '{host_name}', "
                f"which has no certificate record. Available: {available_str}"
            )
        else:
            user_message = (
                f"ACME host '{host_name}' has no certificate record. Available: {available_str}"
            )

        super().__init__(user_message, internal_details=internal_details)

        self.host_name = host_name
        self.instance = instance
        self.available_hosts = available


class MalformedOverlayFlagError(TunnelError):
    """Raised when an extra_args value is neither a boolean nor a string.

    Attributes:
        flag: The offending flag name.
        value: The rejected value.
    """

    def __init__(self, flag: str, value: Any) -> None:
        super().__init__(
            f"Extra argument '{flag}' must be a boolean or a string, "
            f"got {type(value).__name__}"
        )
        self.flag = flag
        self.value = value


class ConfigurationError(TunnelError):
    """Raised when a configuration file cannot be read or parsed.

    Attributes:
        file_path: Path to the configuration file (if known).
        field_path: Dot-separated path to the invalid field (if known).

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid certificate record",
        ...     file_path="acme.yaml",
        ...     field_path="certificates.example.com",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        context_parts: list[str] = []
        if file_path:
            context_parts.append(f"in {file_path}")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path
