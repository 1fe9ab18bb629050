# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Shared value types for the credential-display Python SDK."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union


class ClaimFormat(str, Enum):
    """Closed set of credential encodings the normalizer understands."""

    SD_JWT_VC = "vc+sd-jwt"
    MSO_MDOC = "mso_mdoc"
    JWT_VC = "jwt_vc"
    LDP_VC = "ldp_vc"


@dataclass(frozen=True)
class DisplayImage:
    """An image reference (logo or background) with optional alt text."""

    url: str
    alt_text: str | None = None


@dataclass(frozen=True)
class IssuerDisplay:
    """Display information for the issuer of a credential."""

    name: str = "Unknown"
    logo: DisplayImage | None = None
    # Host name derived from the OpenID4VC issuer identifier.
    domain: str | None = None


@dataclass(frozen=True)
class CredentialDisplay:
    """Display descriptor rendered on a credential card."""

    name: str = "Credential"
    issuer: IssuerDisplay = field(default_factory=IssuerDisplay)
    description: str | None = None
    text_color: str | None = None
    background_color: str | None = None
    background_image: DisplayImage | None = None


@dataclass(frozen=True)
class CredentialMetadata:
    """Issuance metadata surfaced next to the credential attributes."""

    type: str
    issuer: str
    holder: str | None = None
    issued_at: str | None = None
    valid_from: str | None = None
    valid_until: str | None = None


@dataclass(frozen=True)
class CredentialCategory:
    """Classification tag stored alongside a credential record."""

    credential_category: str
    # Whether this instance of the canonical records is displayed by default.
    display_priority: bool | None = None
    can_delete_credential: bool = True


@dataclass(frozen=True)
class NormalizedCredential:
    """Uniform, display-ready view of any supported credential record."""

    id: str
    created_at: datetime
    display: CredentialDisplay
    attributes: dict[str, Any]
    raw_attributes: dict[str, Any]
    metadata: CredentialMetadata
    claim_format: ClaimFormat
    category: CredentialCategory | None = None
    has_refresh_token: bool = False


@dataclass(frozen=True)
class DisclosedCredential:
    """A candidate credential together with what it would disclose."""

    credential: NormalizedCredential
    attributes: dict[str, Any]
    metadata: CredentialMetadata | None
    paths: list[list[str]]


@dataclass(frozen=True)
class SatisfiedEntry:
    """A submission entry for which at least one credential matched."""

    input_descriptor_id: str
    credentials: list[DisclosedCredential]
    name: str | None = None
    description: str | None = None

    @property
    def is_satisfied(self) -> bool:
        return True


@dataclass(frozen=True)
class UnsatisfiedEntry:
    """A submission entry no held credential can satisfy."""

    input_descriptor_id: str
    requested_attribute_paths: list[list[str]]
    name: str | None = None
    description: str | None = None

    @property
    def is_satisfied(self) -> bool:
        return False


FormattedSubmissionEntry = Union[SatisfiedEntry, UnsatisfiedEntry]


@dataclass(frozen=True)
class FormattedSubmission:
    """Satisfied/unsatisfied report for a whole presentation request."""

    name: str
    entries: list[FormattedSubmissionEntry]
    purpose: str | None = None

    @property
    def are_all_satisfied(self) -> bool:
        """True when every entry is satisfied (vacuously true when empty)."""
        return all(entry.is_satisfied for entry in self.entries)


@dataclass(frozen=True)
class VerifierInfo:
    """Verifier identity hints taken from a resolved authorization request."""

    entity_id: str
    host_name: str | None = None
    name: str | None = None
    logo: DisplayImage | None = None


class CredentialDisplayError(Exception):
    """Base class for all errors raised by this package."""


class UnsupportedFormatError(CredentialDisplayError):
    """Raised when a record outside the supported claim formats is normalized."""


class SubmissionError(CredentialDisplayError):
    """Raised when a presentation request cannot be formatted or answered."""


class RequestInputError(CredentialDisplayError):
    """Raised when neither a request payload nor a URI is supplied."""


class InvitationError(CredentialDisplayError):
    """Raised when an invitation payload is not recognized."""


class PathSyntaxError(CredentialDisplayError):
    """Raised when a constraint field path falls outside the supported grammar."""


class RecordParseError(CredentialDisplayError):
    """Raised when a JSON-decoded record snapshot is structurally invalid."""
