"""Security utilities for tunnelctl.

This module provides credential detection for tunnel declarations:
- Literal passwords in proxy / upgrade credentials
- detect-secrets scanning of header values and extra_args
"""

from __future__ import annotations

from tunnelctl_core.security.credential_detector import (
    CredentialWarning,
    DetectedSecret,
    detect_credentials_in_string,
    find_inline_credentials,
    has_literal_password,
)

__all__ = [
    "CredentialWarning",
    "DetectedSecret",
    "detect_credentials_in_string",
    "find_inline_credentials",
    "has_literal_password",
]
