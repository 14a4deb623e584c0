"""ACME certificate registry resolution for tunnelctl.

This module handles the certificate-authority collaborator:
- CertificateAuthority: the lookup interface the Compiler depends on
- AcmeRegistry: in-memory implementation backed by acme.yaml
- Registry file discovery (explicit path, TUNNELCTL_ACME_REGISTRY,
  standard search paths)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

import yaml
from pydantic import ValidationError as PydanticValidationError

from tunnelctl_core.errors import ConfigurationError, UnresolvedAcmeHostError
from tunnelctl_core.schemas.acme import AcmeRegistrySpec, CertificateRecord

logger = logging.getLogger(__name__)

# Environment variable pointing at acme.yaml
ACME_REGISTRY_ENV_VAR = "TUNNELCTL_ACME_REGISTRY"

# Standard registry file name
ACME_REGISTRY_FILE_NAME = "acme.yaml"

# Standard locations to search for acme.yaml
ACME_REGISTRY_SEARCH_PATHS = (
    Path("."),
    Path(".tunnelctl"),
    Path("/etc/tunnelctl"),
)


class CertificateAuthority(Protocol):
    """Read-only provider of ACME certificate records."""

    def lookup(self, host_name: str) -> CertificateRecord:
        """Return the record for ``host_name``.

        Raises:
            UnresolvedAcmeHostError: If the host is not managed.
        """
        ...


class AcmeRegistry:
    """Certificate records keyed by host name.

    Example:
        >>> registry = AcmeRegistry(
        ...     {"example.com": CertificateRecord(directory="/var/lib/acme/example.com")}
        ... )
        >>> registry.lookup("example.com").fullchain_path
        '/var/lib/acme/example.com/fullchain.pem'

        >>> registry = AcmeRegistry.from_yaml(Path("acme.yaml"))
    """

    def __init__(self, records: Mapping[str, CertificateRecord] | None = None) -> None:
        self._records: dict[str, CertificateRecord] = dict(records or {})

    @property
    def hosts(self) -> list[str]:
        return list(self._records)

    def lookup(self, host_name: str) -> CertificateRecord:
        try:
            record = self._records[host_name]
        except KeyError as e:
            raise UnresolvedAcmeHostError(host_name, available_hosts=self.hosts) from e
        logger.debug("Resolved ACME host %s -> %s", host_name, record.directory)
        return record

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> AcmeRegistry:
        """Build a registry from the acme.yaml document structure."""
        spec = AcmeRegistrySpec.model_validate(dict(data))
        return cls(spec.certificates)

    @classmethod
    def from_yaml(cls, path: Path) -> AcmeRegistry:
        """Load a registry from acme.yaml.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ConfigurationError: If the file is not a valid registry.
        """
        if not path.exists():
            raise FileNotFoundError(f"ACME registry not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                "ACME registry is not valid YAML",
                file_path=str(path),
                internal_details=str(e),
            ) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError("ACME registry must be a mapping", file_path=str(path))

        try:
            registry = cls.from_mapping(data)
        except PydanticValidationError as e:
            first = e.errors()[0]
            raise ConfigurationError(
                f"Invalid ACME registry: {first['msg']}",
                file_path=str(path),
                field_path=".".join(str(x) for x in first["loc"]),
                internal_details=str(e),
            ) from e

        logger.info("Loaded %d ACME certificate record(s) from %s", len(registry.hosts), path)
        return registry


def find_registry_file(
    search_paths: tuple[Path, ...] = ACME_REGISTRY_SEARCH_PATHS,
) -> Path | None:
    """Locate acme.yaml via TUNNELCTL_ACME_REGISTRY or the search paths.

    Returns:
        Path to the registry file, or None when none exists.
    """
    env_path = os.environ.get(ACME_REGISTRY_ENV_VAR)
    if env_path:
        logger.debug("Using ACME registry from %s=%s", ACME_REGISTRY_ENV_VAR, env_path)
        return Path(env_path)

    for base_path in search_paths:
        candidate = base_path / ACME_REGISTRY_FILE_NAME
        if candidate.exists():
            logger.debug("Found ACME registry at %s", candidate)
            return candidate

    return None


def load_registry(
    path: Path | str | None = None,
    search_paths: tuple[Path, ...] = ACME_REGISTRY_SEARCH_PATHS,
) -> AcmeRegistry:
    """Load the ACME registry from an explicit path or by discovery.

    An empty registry is returned when nothing is found; any ACME
    reference then fails at compile time.
    """
    resolved = Path(path) if path is not None else find_registry_file(search_paths)
    if resolved is None:
        logger.debug("No ACME registry found, using an empty one")
        return AcmeRegistry()
    return AcmeRegistry.from_yaml(resolved)
