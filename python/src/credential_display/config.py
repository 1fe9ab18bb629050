# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Formatting constants.

Fixed values describe the credential formats themselves and must not change.
Operational values may be overridden through environment variables, read
once at import time.
"""

from __future__ import annotations

import os

# =============================================================================
# FIXED (defined by the credential formats)
# =============================================================================

# Claims of an SD-JWT VC payload that are never shown as attributes.
SD_JWT_RESERVED_CLAIMS: frozenset[str] = frozenset(
    {"_sd_alg", "_sd_hash", "iss", "vct", "cnf", "iat", "nbf", "exp"}
)

# JWK members that take part in the thumbprint, in serialization order.
JWK_THUMBPRINT_FIELDS: tuple[str, ...] = ("k", "e", "crv", "kty", "n", "x", "y")

JWK_THUMBPRINT_URN_PREFIX = "urn:ietf:params:oauth:jwk-thumbprint:sha-256:"

# Structural wrappers dropped when simplifying constraint field paths.
STRUCTURAL_PATH_SEGMENTS: frozenset[str] = frozenset({"vc", "vp", "credentialSubject"})

# Cryptosuite identifying the AnonCreds W3C bridge format.
ANONCREDS_CRYPTOSUITE = "anoncreds-2023"

DEFAULT_CREDENTIAL_NAME = "Credential"
DEFAULT_ISSUER_NAME = "Unknown"
DEFAULT_SUBMISSION_NAME = "unknown"

# =============================================================================
# OPERATIONAL (environment overrides)
# =============================================================================


def _int_from_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


# Depth cap for disclosed attribute paths; deeper sub-trees show as one path.
DISCLOSURE_MAX_DEPTH: int = _int_from_env("CREDENTIAL_DISPLAY_DISCLOSURE_DEPTH", 2)

# Locale prefix preferred when picking among localized display entries.
PREFERRED_LOCALE_PREFIX: str = os.getenv("CREDENTIAL_DISPLAY_PREFERRED_LOCALE_PREFIX", "en-")
