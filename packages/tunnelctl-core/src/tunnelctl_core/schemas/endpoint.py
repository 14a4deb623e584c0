"""Endpoint model for tunnelctl.

An Endpoint is a host/port pair used for server listen addresses and
restrict-to forward targets. It renders as ``host:port`` on the
command line.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Inclusive TCP/UDP port range
MIN_PORT = 0
MAX_PORT = 65535


class Endpoint(BaseModel):
    """A ``host:port`` pair.

    Accepts either the mapping form or the string form on input:

    Example:
        >>> Endpoint(host="127.0.0.1", port=51820)
        >>> Endpoint.model_validate("127.0.0.1:51820")
        >>> str(Endpoint(host="0.0.0.0", port=443))
        '0.0.0.0:443'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    host: str = Field(
        ...,
        min_length=1,
        description="Hostname or IP address",
    )
    port: int = Field(
        ...,
        ge=MIN_PORT,
        le=MAX_PORT,
        description="Port number",
    )

    @model_validator(mode="before")
    @classmethod
    def parse_host_port_string(cls, data: Any) -> Any:
        """Split ``"host:port"`` strings at the last colon."""
        if not isinstance(data, str):
            return data

        host, sep, port = data.rpartition(":")
        if not sep or not host:
            raise ValueError(f"Expected 'host:port', got '{data}'")
        return {"host": host, "port": port}

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"
