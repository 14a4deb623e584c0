"""systemd unit file renderer for tunnelctl.

This module turns UnitDescriptors into systemd ``.service`` files, the
format the host supervisor consumes.

Key Features:
    - ExecStart quoting per systemd rules (``%`` specifiers escaped,
      control characters written as C escapes)
    - ``${VAR}`` references left intact so secrets can come from
      EnvironmentFile= at run time instead of the unit file
    - Restart backoff via RestartSec/RestartSteps/RestartMaxDelaySec

Example:
    >>> compiled = Compiler().compile_file("tunnels.yaml")
    >>> print(render_unit_file(compiled.units["wstunnel-client-wg"]))
    >>> write_unit_files(compiled, Path("/etc/systemd/system"))
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from tunnelctl_core.compiler.models import CompiledUnits, RestartPolicy, UnitDescriptor

logger = logging.getLogger(__name__)

# Unit file suffix
UNIT_FILE_SUFFIX = ".service"

# Arguments matching this need no quoting in ExecStart=
_SAFE_ARGUMENT = re.compile(r"^[A-Za-z0-9_@%+=:,./${}\[\]?&-]+$")

# C-style escapes systemd understands inside double quotes
_CONTROL_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}


def _escape_char(char: str) -> str:
    if char in _CONTROL_ESCAPES:
        return _CONTROL_ESCAPES[char]
    if ord(char) < 0x20 or ord(char) == 0x7F:
        return f"\\x{ord(char):02x}"
    return char


def _double_quote(text: str) -> str:
    """Double-quote text so it stays on one unit file line."""
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return '"' + "".join(_escape_char(char) for char in escaped) + '"'


def quote_exec_argument(argument: str) -> str:
    """Quote a single argv element for ExecStart=.

    Control characters are written as C escapes, so no value can end the
    ExecStart= line early.

    Example:
        >>> quote_exec_argument("wss://0.0.0.0:443")
        'wss://0.0.0.0:443'
        >>> quote_exec_argument("X-Name:a b")
        '"X-Name:a b"'
    """
    escaped = argument.replace("%", "%%")
    if escaped and _SAFE_ARGUMENT.match(escaped):
        return escaped
    return _double_quote(escaped)


def _quote_environment(name: str, value: str) -> str:
    return _double_quote(f"{name}={value}".replace("%", "%%"))


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"


def _format_delay(seconds: int) -> str:
    if seconds and seconds % 60 == 0:
        return f"{seconds // 60}min"
    return str(seconds)


def _restart_lines(policy: RestartPolicy) -> list[str]:
    return [
        f"Restart={policy.restart}",
        f"RestartSec={_format_delay(policy.initial_delay_seconds)}",
        f"RestartSteps={policy.steps}",
        f"RestartMaxDelaySec={_format_delay(policy.max_delay_seconds)}",
    ]


def render_unit_file(unit: UnitDescriptor) -> str:
    """Render one descriptor as a systemd unit file.

    Args:
        unit: Compiled unit descriptor.

    Returns:
        Unit file content, newline-terminated.
    """
    lines = [
        "[Unit]",
        f"Description={unit.description}",
        f"Requires={' '.join(unit.requires)}",
        f"After={' '.join(unit.after)}",
        "",
        "[Service]",
        f"Type={unit.service_type}",
        f"ExecStart={' '.join(quote_exec_argument(arg) for arg in unit.command)}",
    ]

    for name, value in unit.environment.items():
        lines.append(f"Environment={_quote_environment(name, value)}")
    for env_file in unit.environment_files:
        lines.append(f"EnvironmentFile={env_file}")

    sandbox = unit.sandbox
    lines.append(f"DynamicUser={_yes_no(sandbox.dynamic_user)}")
    if sandbox.supplementary_groups:
        lines.append(f"SupplementaryGroups={' '.join(sandbox.supplementary_groups)}")
    if unit.capabilities:
        lines.append(f"AmbientCapabilities={' '.join(c.value for c in unit.capabilities)}")
    lines.extend(
        [
            f"PrivateTmp={_yes_no(sandbox.private_tmp)}",
            f"NoNewPrivileges={_yes_no(sandbox.no_new_privileges)}",
            f"RestrictNamespaces={sandbox.restrict_namespaces}",
            f"ProtectSystem={sandbox.protect_system}",
            f"ProtectHome={_yes_no(sandbox.protect_home)}",
            f"ProtectKernelTunables={_yes_no(sandbox.protect_kernel_tunables)}",
            f"ProtectKernelModules={_yes_no(sandbox.protect_kernel_modules)}",
            f"ProtectControlGroups={_yes_no(sandbox.protect_control_groups)}",
            f"PrivateDevices={_yes_no(sandbox.private_devices)}",
            f"RestrictSUIDSGID={_yes_no(sandbox.restrict_suid_sgid)}",
        ]
    )
    lines.extend(_restart_lines(unit.restart_policy))

    if unit.wanted_by:
        lines.extend(["", "[Install]", f"WantedBy={' '.join(unit.wanted_by)}"])

    return "\n".join(lines) + "\n"


def write_unit_files(compiled: CompiledUnits, directory: Path) -> list[Path]:
    """Write ``<unit name>.service`` for every compiled unit.

    Every file is first written next to its target with a ``.tmp``
    suffix. Targets are only replaced once all of them were staged; on
    failure the staged files are removed and existing units stay as
    they were.

    Args:
        compiled: Output of Compiler.compile().
        directory: Target directory, created if missing.

    Returns:
        Paths written, in unit order.

    Raises:
        OSError: If the directory or a unit file cannot be written.
    """
    rendered = [
        (directory / f"{name}{UNIT_FILE_SUFFIX}", render_unit_file(unit))
        for name, unit in compiled.units.items()
    ]
    directory.mkdir(parents=True, exist_ok=True)

    staged: list[tuple[Path, Path]] = []
    try:
        for path, content in rendered:
            staging = path.with_name(f"{path.name}.tmp")
            staged.append((staging, path))
            staging.write_text(content)
    except OSError:
        for staging, _ in staged:
            if staging.is_file():
                staging.unlink()
        raise

    written: list[Path] = []
    for staging, path in staged:
        staging.replace(path)
        written.append(path)
        logger.info("Wrote %s", path)
    return written
