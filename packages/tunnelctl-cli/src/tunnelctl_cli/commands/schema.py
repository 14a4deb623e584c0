"""tunnelctl schema command - Export JSON Schema."""

from __future__ import annotations

from pathlib import Path

import click

from tunnelctl_cli.errors import EXIT_USER_ERROR, handle_permission_error
from tunnelctl_cli.output import error, success


@click.group()
def schema() -> None:
    """Manage JSON Schema for editor support.

    **Commands:**

    - `tunnelctl schema export` - Export TunnelSpec (tunnels.yaml) JSON Schema
    - `tunnelctl schema export-units` - Export CompiledUnits JSON Schema
    """
    pass


@schema.command("export")
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    default="./schemas/tunnels.schema.json",
    help="Output path [default: ./schemas/tunnels.schema.json]",
)
def export_schema(output_path: str) -> None:
    """Export TunnelSpec JSON Schema.

    Examples:

        tunnelctl schema export

        tunnelctl schema export --output custom/path/schema.json
    """
    try:
        # Import here to avoid heavy imports at CLI startup
        from tunnelctl_core import export_tunnel_spec_schema

        export_tunnel_spec_schema(Path(output_path))
        success(f"Schema exported to {output_path}")

    except PermissionError:
        handle_permission_error(output_path, "write to")

    except Exception as e:
        error(f"Schema export failed: {e}")
        raise SystemExit(EXIT_USER_ERROR) from None


@schema.command("export-units")
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    default="./schemas/compiled-units.schema.json",
    help="Output path [default: ./schemas/compiled-units.schema.json]",
)
def export_units_schema(output_path: str) -> None:
    """Export CompiledUnits JSON Schema.

    Examples:

        tunnelctl schema export-units
    """
    try:
        from tunnelctl_core import export_compiled_units_schema

        export_compiled_units_schema(Path(output_path))
        success(f"Units schema exported to {output_path}")

    except PermissionError:
        handle_permission_error(output_path, "write to")

    except Exception as e:
        error(f"Units schema export failed: {e}")
        raise SystemExit(EXIT_USER_ERROR) from None
