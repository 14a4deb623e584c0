"""CLI command modules.

This package contains the implementation of all CLI subcommands, plus
the tunnels.yaml loading they share.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from tunnelctl_cli.errors import (
    CLIError,
    handle_file_not_found,
    handle_validation_error,
    handle_yaml_error,
)

if TYPE_CHECKING:
    from tunnelctl_core import TunnelSpec

# Default location of the tunnel declarations
DEFAULT_SPEC_PATH = "./tunnels.yaml"


def load_spec(file_path: str) -> TunnelSpec:
    """Load tunnels.yaml, converting failures into CLIError.

    Raises:
        CLIError: Exit code 2 for a missing file, 1 for invalid content.
    """
    path = Path(file_path)
    if not path.exists():
        handle_file_not_found(file_path)

    # Import here to avoid heavy imports at CLI startup
    import yaml
    from pydantic import ValidationError as PydanticValidationError

    from tunnelctl_core import TunnelError, TunnelSpec

    try:
        return TunnelSpec.from_yaml(path)
    except yaml.YAMLError as e:
        handle_yaml_error(e, file_path)
    except PydanticValidationError as e:
        handle_validation_error(e, file_path)
    except TunnelError as e:
        raise CLIError(e.user_message) from None


__all__: list[str] = ["DEFAULT_SPEC_PATH", "load_spec"]
