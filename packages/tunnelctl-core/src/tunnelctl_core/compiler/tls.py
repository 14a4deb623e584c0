"""TLS material resolution for server instances."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tunnelctl_core.compiler.acme_resolver import CertificateAuthority
from tunnelctl_core.errors import UnresolvedAcmeHostError
from tunnelctl_core.schemas.instances import ServerInstance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TlsMaterial:
    """Certificate/key paths handed to the server.

    Attributes:
        certificate_path: Certificate chain (PEM).
        key_path: Private key (PEM).
        group: Group to join for read access, set for ACME certificates.
    """

    certificate_path: str
    key_path: str
    group: str | None = None


def resolve_tls(
    name: str,
    server: ServerInstance,
    certificate_authority: CertificateAuthority,
) -> TlsMaterial | None:
    """Resolve the certificate pair of an HTTPS server.

    Only meaningful when ``server.use_https`` is set; callers skip it for
    plaintext servers.

    Args:
        name: Instance name, used in error messages.
        server: A validated server instance.
        certificate_authority: ACME record provider.

    Returns:
        The resolved material, or None when wstunnel should use its
        built-in certificate.

    Raises:
        UnresolvedAcmeHostError: If the ACME host is unknown to the provider.
    """
    if server.acme_host_name is not None:
        try:
            record = certificate_authority.lookup(server.acme_host_name)
        except UnresolvedAcmeHostError as e:
            raise UnresolvedAcmeHostError(
                e.host_name,
                instance=name,
                available_hosts=e.available_hosts,
            ) from e
        return TlsMaterial(
            certificate_path=record.fullchain_path,
            key_path=record.key_path,
            group=record.group,
        )

    if server.tls_certificate_path is not None and server.tls_key_path is not None:
        return TlsMaterial(
            certificate_path=server.tls_certificate_path,
            key_path=server.tls_key_path,
        )

    logger.debug("Server %s has no TLS material, using wstunnel's built-in certificate", name)
    return None
