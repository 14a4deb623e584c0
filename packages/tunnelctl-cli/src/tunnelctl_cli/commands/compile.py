"""tunnelctl compile command - Generate supervisor units."""

from __future__ import annotations

from pathlib import Path

import click

from tunnelctl_cli.commands import DEFAULT_SPEC_PATH, load_spec
from tunnelctl_cli.errors import (
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    CLIError,
    handle_permission_error,
)
from tunnelctl_cli.output import error, info, success

# Output file of --format json
COMPILED_UNITS_FILE_NAME = "compiled_units.json"


@click.command("compile")
@click.option(
    "-f",
    "--file",
    "file_path",
    type=click.Path(exists=False),
    default=DEFAULT_SPEC_PATH,
    help=f"Path to tunnels.yaml [default: {DEFAULT_SPEC_PATH}]",
)
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    default="./units/",
    help="Output directory [default: ./units/]",
)
@click.option(
    "--acme-registry",
    "registry_path",
    type=click.Path(),
    default=None,
    help="Path to acme.yaml [default: $TUNNELCTL_ACME_REGISTRY or discovered]",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["systemd", "json"]),
    default="systemd",
    help="Write systemd .service files or compiled_units.json [default: systemd]",
)
def compile_cmd(
    file_path: str,
    output_path: str,
    registry_path: str | None,
    output_format: str,
) -> None:
    """Generate supervisor units from tunnels.yaml.

    Every enabled server and client becomes one unit named
    `wstunnel-server-<name>` or `wstunnel-client-<name>`. Nothing is
    written unless every instance compiles.

    Examples:

        tunnelctl compile

        tunnelctl compile --output /etc/systemd/system

        tunnelctl compile --acme-registry acme.yaml --format json
    """
    spec = load_spec(file_path)
    output = Path(output_path)

    # Import here to avoid heavy imports at CLI startup
    from tunnelctl_core import (
        Compiler,
        TunnelError,
        compute_source_hash,
        load_registry,
        write_unit_files,
    )

    try:
        registry = load_registry(registry_path)
        compiled = Compiler(registry).compile(
            spec, source_hash=compute_source_hash(Path(file_path).read_text())
        )
    except FileNotFoundError as e:
        error(str(e))
        raise SystemExit(EXIT_SYSTEM_ERROR) from None
    except TunnelError as e:
        error(f"Compilation failed: {e.user_message}")
        raise SystemExit(EXIT_USER_ERROR) from None

    try:
        if output_format == "json":
            output.mkdir(parents=True, exist_ok=True)
            artifacts_path = output / COMPILED_UNITS_FILE_NAME
            artifacts_path.write_text(compiled.model_dump_json(indent=2))
            success(f"Compiled {len(compiled.units)} unit(s) to {artifacts_path}")
            return

        written = write_unit_files(compiled, output)
    except PermissionError:
        handle_permission_error(output_path, "write to")
    except OSError as e:
        raise CLIError(
            f"Cannot write units to {output_path}: {e.strerror or e}",
            exit_code=EXIT_SYSTEM_ERROR,
        ) from None

    for unit_path in written:
        info(f"  {unit_path}")
    success(f"Compiled {len(written)} unit(s) to {output}")
