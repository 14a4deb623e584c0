"""Command line assembly for wstunnel units.

The command line is built from two ordered flag maps:
- computed flags derived from instance fields (fixed field-to-flag table)
- the user's extra_args overlay

On a key collision the overlay value replaces the computed one entirely.
Flags are emitted in computed declaration order, then overlay-only flags
in their declared order, followed by exactly one positional argument.

Serialization follows GNU conventions:
- True -> ``--flag``
- False, None, empty string, empty sequence -> omitted
- scalar -> ``--flag value``
- sequence -> ``--flag item`` repeated per element, in order
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Union

from tunnelctl_core.compiler.tls import TlsMaterial
from tunnelctl_core.errors import MalformedOverlayFlagError
from tunnelctl_core.schemas.instances import ClientInstance, ServerInstance

FlagValue = Union[bool, int, str, Sequence[str], None]

# wstunnel subcommands
SERVER_SUBCOMMAND = "server"
CLIENT_SUBCOMMAND = "client"

# Field-to-flag table
FLAG_RESTRICT_TO = "restrict-to"
FLAG_TLS_CERTIFICATE = "tls-certificate"
FLAG_TLS_PRIVATE_KEY = "tls-private-key"
FLAG_PING_FREQUENCY = "websocket-ping-frequency-sec"
FLAG_LOCAL_TO_REMOTE = "local-to-remote"
FLAG_REMOTE_TO_LOCAL = "remote-to-local"
FLAG_HTTP_HEADERS = "http-headers"
FLAG_HTTP_PROXY = "http-proxy"
FLAG_SOCKET_MARK = "socket-so-mark"
FLAG_UPGRADE_PATH_PREFIX = "http-upgrade-path-prefix"
FLAG_TLS_SNI_OVERRIDE = "tls-sni-override"
FLAG_TLS_VERIFY_CERTIFICATE = "tls-verify-certificate"
FLAG_UPGRADE_CREDENTIALS = "http-upgrade-credentials"


def server_flags(server: ServerInstance, tls: TlsMaterial | None) -> dict[str, FlagValue]:
    """Computed flags of a server instance, in declaration order."""
    return {
        FLAG_RESTRICT_TO: [str(target) for target in server.restrict_to],
        FLAG_TLS_CERTIFICATE: tls.certificate_path if tls else None,
        FLAG_TLS_PRIVATE_KEY: tls.key_path if tls else None,
        FLAG_PING_FREQUENCY: server.ping_interval_seconds,
    }


def client_flags(client: ClientInstance) -> dict[str, FlagValue]:
    """Computed flags of a client instance, in declaration order."""
    return {
        FLAG_LOCAL_TO_REMOTE: list(client.local_to_remote),
        FLAG_REMOTE_TO_LOCAL: list(client.remote_to_local),
        FLAG_HTTP_HEADERS: [f"{name}:{value}" for name, value in client.custom_headers.items()],
        FLAG_HTTP_PROXY: client.proxy,
        FLAG_SOCKET_MARK: client.socket_mark,
        FLAG_UPGRADE_PATH_PREFIX: client.upgrade_path_prefix or None,
        FLAG_TLS_SNI_OVERRIDE: client.tls_server_name_override or None,
        FLAG_TLS_VERIFY_CERTIFICATE: client.tls_verify_certificate,
        FLAG_PING_FREQUENCY: client.ping_interval_seconds,
        FLAG_UPGRADE_CREDENTIALS: client.upgrade_credentials or None,
    }


def server_positional(server: ServerInstance) -> str:
    """Listen URL, e.g. ``wss://0.0.0.0:443``."""
    return f"{server.scheme}://{server.listen}"


def merge_overlay(
    computed: Mapping[str, FlagValue],
    overlay: Mapping[str, object],
) -> dict[str, FlagValue]:
    """Overlay user flags onto computed flags.

    Raises:
        MalformedOverlayFlagError: If an overlay value is not a bool or str.

    Example:
        >>> merge_overlay({"restrict-to": ["127.0.0.1:51820"]}, {"restrict-to": False})
        {'restrict-to': False}
    """
    merged: dict[str, FlagValue] = dict(computed)
    for flag, value in overlay.items():
        if not isinstance(value, (bool, str)):
            raise MalformedOverlayFlagError(flag, value)
        merged[flag] = value
    return merged


def render_flags(flags: Mapping[str, FlagValue]) -> list[str]:
    """Serialize a flag map to argv elements."""
    argv: list[str] = []
    for flag, value in flags.items():
        option = f"--{flag}"
        if value is None or value is False:
            continue
        if value is True:
            argv.append(option)
        elif isinstance(value, (str, int)):
            if value == "":
                continue
            argv.extend([option, str(value)])
        else:
            for item in value:
                argv.extend([option, str(item)])
    return argv


def build_command(
    executable: str,
    subcommand: str,
    computed: Mapping[str, FlagValue],
    overlay: Mapping[str, object],
    positional: str,
) -> tuple[str, ...]:
    """Assemble the full argv of a unit.

    Args:
        executable: Path to the wstunnel binary.
        subcommand: "server" or "client".
        computed: Flags derived from instance fields.
        overlay: The instance's extra_args.
        positional: Listen URL (server) or connect target (client).

    Returns:
        ``(executable, subcommand, *flags, positional)``
    """
    flags = render_flags(merge_overlay(computed, overlay))
    return (executable, subcommand, *flags, positional)


def build_server_command(server: ServerInstance, tls: TlsMaterial | None) -> tuple[str, ...]:
    return build_command(
        server.executable_path,
        SERVER_SUBCOMMAND,
        server_flags(server, tls),
        server.extra_args,
        server_positional(server),
    )


def build_client_command(client: ClientInstance) -> tuple[str, ...]:
    return build_command(
        client.executable_path,
        CLIENT_SUBCOMMAND,
        client_flags(client),
        client.extra_args,
        client.connect_target,
    )
