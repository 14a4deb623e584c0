"""CLI entry point for tunnelctl.

This module defines the main CLI group. Subcommands are loaded lazily so
that ``tunnelctl --help`` stays fast.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from tunnelctl_cli import __version__
from tunnelctl_cli.output import set_no_color

# Configure rich-click for better help formatting
rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LazyGroup(rclick.RichGroup):
    """Click group that loads commands lazily.

    Attributes:
        lazy_subcommands: Mapping of command names to ``module.attribute`` paths.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        commands = set(super().list_commands(ctx))
        commands.update(self.lazy_subcommands.keys())
        return sorted(commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        cmd = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if cmd is not None:
            return cmd

        if cmd_name not in self.lazy_subcommands:
            return None

        module_name, attr_name = self.lazy_subcommands[cmd_name].rsplit(".", 1)
        mod = importlib.import_module(module_name)
        return getattr(mod, attr_name)  # type: ignore[no-any-return]


LAZY_COMMANDS = {
    "validate": "tunnelctl_cli.commands.validate.validate",
    "compile": "tunnelctl_cli.commands.compile.compile_cmd",
    "show": "tunnelctl_cli.commands.show.show",
    "schema": "tunnelctl_cli.commands.schema.schema",
}


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="tunnelctl")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    envvar="TUNNELCTL_LOG_LEVEL",
    show_default=True,
    help="Minimum level of log messages written to stderr.",
)
def cli(log_level: str) -> None:
    """tunnelctl - compile wstunnel declarations into supervised units.

    Declare wstunnel servers and clients in tunnels.yaml, then generate
    sandboxed systemd services for them.

    **Getting Started:**

    - `tunnelctl validate` - Check tunnels.yaml
    - `tunnelctl compile` - Generate systemd units
    - `tunnelctl show UNIT` - Print the command line of one unit
    - `tunnelctl schema export` - Export JSON Schema for editor support
    """
    from tunnelctl_core.observability import configure_logging

    configure_logging(log_level=log_level)


if __name__ == "__main__":
    cli()
