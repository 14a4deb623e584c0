"""ACME certificate registry models for tunnelctl.

The certificate-authority integration is external to tunnelctl. These
models describe what it exposes: for each managed host, the directory
holding fullchain.pem / key.pem and the group owning that directory.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Conventional layout of the host ACME client
DEFAULT_ACME_ROOT = "/var/lib/acme"
DEFAULT_ACME_GROUP = "acme"


class CertificateRecord(BaseModel):
    """Certificate location and owning group for one ACME host.

    Attributes:
        directory: Directory containing fullchain.pem and key.pem.
        group: Group owning the directory. Units reading the certificate
            join this group.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    directory: str = Field(
        ...,
        min_length=1,
        description="Directory containing fullchain.pem and key.pem",
    )
    group: str = Field(
        default=DEFAULT_ACME_GROUP,
        min_length=1,
        description="Group owning the certificate directory",
    )

    @property
    def fullchain_path(self) -> str:
        return f"{self.directory}/fullchain.pem"

    @property
    def key_path(self) -> str:
        return f"{self.directory}/key.pem"


class AcmeRegistrySpec(BaseModel):
    """Root model for acme.yaml.

    Entries may omit ``directory`` (defaults to ``/var/lib/acme/<host>``)
    and ``group`` (defaults to ``acme``). A null entry uses both defaults.

    Example:
        >>> AcmeRegistrySpec.model_validate(
        ...     {"certificates": {"example.com": {"group": "nginx"}}}
        ... ).certificates["example.com"].directory
        '/var/lib/acme/example.com'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    certificates: dict[str, CertificateRecord] = Field(
        default_factory=dict,
        description="Certificate records keyed by host name",
    )

    @model_validator(mode="before")
    @classmethod
    def fill_default_directories(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        certificates = data.get("certificates")
        if not isinstance(certificates, dict):
            return data

        filled: dict[str, Any] = {}
        for host, record in certificates.items():
            if record is None:
                record = {}
            if isinstance(record, dict) and "directory" not in record:
                record = {**record, "directory": f"{DEFAULT_ACME_ROOT}/{host}"}
            filled[host] = record
        return {**data, "certificates": filled}
