"""tunnelctl-cli: Command line interface for tunnelctl.

Provides the ``tunnelctl`` command for validating tunnels.yaml and
compiling it into systemd units.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
