"""tunnelctl show command - Print one compiled unit."""

from __future__ import annotations

import shlex

import click

from tunnelctl_cli.commands import DEFAULT_SPEC_PATH, load_spec
from tunnelctl_cli.errors import EXIT_SYSTEM_ERROR, EXIT_USER_ERROR, CLIError
from tunnelctl_cli.output import error, plain


@click.command()
@click.argument("unit_name")
@click.option(
    "-f",
    "--file",
    "file_path",
    type=click.Path(exists=False),
    default=DEFAULT_SPEC_PATH,
    help=f"Path to tunnels.yaml [default: {DEFAULT_SPEC_PATH}]",
)
@click.option(
    "--acme-registry",
    "registry_path",
    type=click.Path(),
    default=None,
    help="Path to acme.yaml [default: $TUNNELCTL_ACME_REGISTRY or discovered]",
)
@click.option(
    "--unit-file",
    is_flag=True,
    default=False,
    help="Print the rendered systemd unit instead of the command line.",
)
def show(unit_name: str, file_path: str, registry_path: str | None, unit_file: bool) -> None:
    """Print the command line (or unit file) of one compiled unit.

    UNIT_NAME is the full unit name, e.g. `wstunnel-client-wg-tunnel`.

    Examples:

        tunnelctl show wstunnel-server-wg-tunnel

        tunnelctl show wstunnel-client-wg-tunnel --unit-file
    """
    spec = load_spec(file_path)

    # Import here to avoid heavy imports at CLI startup
    from tunnelctl_core import Compiler, TunnelError, load_registry, render_unit_file

    try:
        compiled = Compiler(load_registry(registry_path)).compile(spec)
    except FileNotFoundError as e:
        raise CLIError(str(e), exit_code=EXIT_SYSTEM_ERROR) from None
    except TunnelError as e:
        raise CLIError(f"Compilation failed: {e.user_message}") from None

    unit = compiled.units.get(unit_name)
    if unit is None:
        available = ", ".join(compiled.units) or "none"
        error(f"Unit '{unit_name}' not found. Available: {available}")
        raise SystemExit(EXIT_USER_ERROR)

    if unit_file:
        plain(render_unit_file(unit).rstrip("\n"))
    else:
        plain(shlex.join(unit.command))
