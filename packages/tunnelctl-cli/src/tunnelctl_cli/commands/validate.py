"""tunnelctl validate command - Validate tunnels.yaml."""

from __future__ import annotations

import click

from tunnelctl_cli.commands import DEFAULT_SPEC_PATH, load_spec
from tunnelctl_cli.errors import EXIT_USER_ERROR
from tunnelctl_cli.output import error, success, warning


@click.command()
@click.option(
    "-f",
    "--file",
    "file_path",
    type=click.Path(exists=False),
    default=DEFAULT_SPEC_PATH,
    help=f"Path to tunnels.yaml [default: {DEFAULT_SPEC_PATH}]",
)
def validate(file_path: str) -> None:
    """Validate tunnels.yaml.

    Checks the schema and the cross-field rules (TLS pair, ACME vs manual
    certificates, client directions). Values that would expose a password
    on the command line are reported as warnings.

    Examples:

        tunnelctl validate

        tunnelctl validate --file /etc/tunnelctl/tunnels.yaml
    """
    spec = load_spec(file_path)

    # Import here to avoid heavy imports at CLI startup
    from tunnelctl_core import find_inline_credentials, validate as validate_spec

    issues = validate_spec(spec.servers, spec.clients)
    for credential in find_inline_credentials(spec):
        warning(str(credential))

    if issues:
        error(f"Invalid configuration in {file_path}:")
        for issue in issues:
            error(f"  {issue}")
        raise SystemExit(EXIT_USER_ERROR)

    success(
        f"Configuration valid ({len(spec.servers)} server(s), {len(spec.clients)} client(s))"
    )
