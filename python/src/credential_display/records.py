# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Input snapshots handed over by the identity agent.

Every record is an immutable view of what the agent has already stored. The
three record classes form a closed union (:data:`CredentialRecord`); the
normalizer in :mod:`normalize` refuses anything else.

Metadata that the agent keeps next to a record (OpenID4VC issuer display,
SD-JWT VC type metadata, category tags) is carried as explicit optional
fields rather than an untyped metadata bag. The ``parse_*`` helpers build
these objects from JSON-decoded dicts and raise :class:`~types.RecordParseError`
on structural problems.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Union

from dateutil.parser import isoparse

from .types import ClaimFormat, CredentialCategory, DisplayImage, RecordParseError


@dataclass(frozen=True)
class DisplayEntry:
    """One localized display entry from issuer or type metadata."""

    name: str | None = None
    locale: str | None = None
    description: str | None = None
    logo: DisplayImage | None = None
    text_color: str | None = None
    background_color: str | None = None
    background_image: DisplayImage | None = None


@dataclass(frozen=True)
class CredentialIssuerMetadata:
    """Issuer part of the OpenID4VC metadata stored with a credential."""

    id: str
    display: list[DisplayEntry] | None = None


@dataclass(frozen=True)
class CredentialConfigurationMetadata:
    """Credential configuration part of the OpenID4VC metadata."""

    display: list[DisplayEntry] | None = None
    order: list[str] | None = None


@dataclass(frozen=True)
class OpenId4VcCredentialMetadata:
    """Display metadata captured from the issuer during OpenID4VCI."""

    credential: CredentialConfigurationMetadata
    issuer: CredentialIssuerMetadata


@dataclass(frozen=True)
class SdJwtTypeMetadata:
    """SD-JWT VC type metadata resolved for a ``vct``."""

    vct: str | None = None
    display: list[DisplayEntry] | None = None


@dataclass(frozen=True)
class SdJwtVcRecord:
    """A stored SD-JWT VC with its disclosures already applied."""

    id: str
    created_at: datetime
    # Decoded payload with every disclosure applied ("pretty claims").
    claims: dict[str, Any]
    type_metadata: SdJwtTypeMetadata | None = None
    openid4vc_metadata: OpenId4VcCredentialMetadata | None = None
    category: CredentialCategory | None = None
    refresh_metadata: dict[str, Any] | None = None

    @property
    def claim_format(self) -> ClaimFormat:
        return ClaimFormat.SD_JWT_VC


@dataclass(frozen=True)
class W3cCredentialRecord:
    """A stored W3C credential, either JWT-proved or linked-data-proved."""

    id: str
    created_at: datetime
    # JSON form of the credential (the decoded ``vc`` claim for JWT VCs).
    credential: dict[str, Any]
    claim_format: ClaimFormat = ClaimFormat.LDP_VC
    openid4vc_metadata: OpenId4VcCredentialMetadata | None = None
    category: CredentialCategory | None = None
    refresh_metadata: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        if self.claim_format not in (ClaimFormat.JWT_VC, ClaimFormat.LDP_VC):
            raise RecordParseError(
                f"W3cCredentialRecord: claim_format must be jwt_vc or ldp_vc, "
                f"got {self.claim_format!r}"
            )


@dataclass(frozen=True)
class MdocRecord:
    """A stored ISO 18013-5 mdoc, exposed as namespaces of elements."""

    id: str
    created_at: datetime
    doc_type: str
    namespaces: dict[str, dict[str, Any]] = field(default_factory=dict)
    signed_at: datetime | None = None
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    openid4vc_metadata: OpenId4VcCredentialMetadata | None = None
    category: CredentialCategory | None = None
    refresh_metadata: dict[str, Any] | None = None

    @property
    def claim_format(self) -> ClaimFormat:
        return ClaimFormat.MSO_MDOC


CredentialRecord = Union[SdJwtVcRecord, W3cCredentialRecord, MdocRecord]


# ------------------------------------------------------------------
# Parsers for JSON-decoded snapshots
# ------------------------------------------------------------------


def parse_openid_display(raw: object) -> DisplayEntry:
    """Parse an OpenID4VCI ``display`` object.

    Logos use ``uri`` in current drafts and ``url`` in older ones; both are
    accepted.
    """
    if not isinstance(raw, Mapping):
        raise RecordParseError(
            f"parse_openid_display: expected object, got {type(raw).__name__}"
        )
    return DisplayEntry(
        name=_optional_str(raw.get("name")),
        locale=_optional_str(raw.get("locale")),
        description=_optional_str(raw.get("description")),
        logo=_parse_image(raw.get("logo")),
        text_color=_optional_str(raw.get("text_color")),
        background_color=_optional_str(raw.get("background_color")),
        background_image=_parse_image(raw.get("background_image")),
    )


def parse_type_metadata_display(raw: object) -> DisplayEntry:
    """Parse a display object from SD-JWT VC type metadata.

    Type metadata tags entries with ``lang`` and nests colors and logo under
    ``rendering.simple``.
    """
    if not isinstance(raw, Mapping):
        raise RecordParseError(
            f"parse_type_metadata_display: expected object, got {type(raw).__name__}"
        )
    rendering = raw.get("rendering")
    simple = rendering.get("simple") if isinstance(rendering, Mapping) else None
    if not isinstance(simple, Mapping):
        simple = {}
    return DisplayEntry(
        name=_optional_str(raw.get("name")),
        locale=_optional_str(raw.get("lang")),
        description=_optional_str(raw.get("description")),
        text_color=_optional_str(simple.get("text_color")),
        background_color=_optional_str(simple.get("background_color")),
        background_image=_parse_image(simple.get("logo")),
    )


def parse_sd_jwt_type_metadata(raw: object) -> SdJwtTypeMetadata:
    """Parse SD-JWT VC type metadata."""
    if not isinstance(raw, Mapping):
        raise RecordParseError(
            f"parse_sd_jwt_type_metadata: expected object, got {type(raw).__name__}"
        )
    return SdJwtTypeMetadata(
        vct=_optional_str(raw.get("vct")),
        display=_parse_display_list(raw.get("display"), parse_type_metadata_display),
    )


def parse_openid4vc_metadata(raw: object) -> OpenId4VcCredentialMetadata:
    """Parse the stored OpenID4VC metadata object.

    Expected shape::

        {"credential": {"display": [...], "order": [...]},
         "issuer": {"id": "https://issuer.example", "display": [...]}}
    """
    if not isinstance(raw, Mapping):
        raise RecordParseError(
            f"parse_openid4vc_metadata: expected object, got {type(raw).__name__}"
        )
    issuer_raw = raw.get("issuer")
    if not isinstance(issuer_raw, Mapping) or not isinstance(issuer_raw.get("id"), str):
        raise RecordParseError('parse_openid4vc_metadata: "issuer.id" must be a string')

    credential_raw = raw.get("credential")
    if not isinstance(credential_raw, Mapping):
        credential_raw = {}
    order = credential_raw.get("order")

    return OpenId4VcCredentialMetadata(
        credential=CredentialConfigurationMetadata(
            display=_parse_display_list(credential_raw.get("display"), parse_openid_display),
            order=[str(o) for o in order] if isinstance(order, list) else None,
        ),
        issuer=CredentialIssuerMetadata(
            id=issuer_raw["id"],
            display=_parse_display_list(issuer_raw.get("display"), parse_openid_display),
        ),
    )


def extract_openid4vc_metadata(
    credential_configuration: Mapping[str, Any],
    issuer_id: str,
    issuer_display: list[Any] | None = None,
) -> OpenId4VcCredentialMetadata:
    """Build the metadata to store with a freshly issued credential.

    Parameters
    ----------
    credential_configuration:
        The offered credential configuration (``display`` and ``order``).
    issuer_id:
        The ``credential_issuer`` identifier from the issuer metadata.
    issuer_display:
        The issuer-level ``display`` array, if any.
    """
    return parse_openid4vc_metadata(
        {
            "credential": {
                "display": credential_configuration.get("display"),
                "order": credential_configuration.get("order"),
            },
            "issuer": {"id": issuer_id, "display": issuer_display},
        }
    )


def parse_credential_category(raw: object) -> CredentialCategory | None:
    if not isinstance(raw, Mapping) or not isinstance(raw.get("credentialCategory"), str):
        return None
    can_delete = raw.get("canDeleteCredential")
    return CredentialCategory(
        credential_category=raw["credentialCategory"],
        display_priority=raw.get("displayPriority"),
        can_delete_credential=can_delete if isinstance(can_delete, bool) else True,
    )


def parse_credential_record(raw: object) -> CredentialRecord:
    """Parse a JSON-decoded record snapshot into one of the record classes.

    The snapshot carries a ``claimFormat`` tag selecting the variant, plus
    ``id``, ``createdAt`` and the variant payload:

    - ``vc+sd-jwt`` (or ``dc+sd-jwt``): ``claims`` and optional ``typeMetadata``
    - ``jwt_vc`` / ``ldp_vc``: ``credential``
    - ``mso_mdoc``: ``docType``, ``namespaces`` and optional ``validityInfo``

    Optional on all variants: ``openId4VcMetadata``, ``category``,
    ``refreshMetadata``.

    Raises
    ------
    RecordParseError
        If the tag is unknown or a required field is missing or mistyped.
    """
    if not isinstance(raw, Mapping):
        raise RecordParseError(
            f"parse_credential_record: expected dict, got {type(raw).__name__}"
        )

    tag = raw.get("claimFormat")
    if tag == "dc+sd-jwt":
        tag = ClaimFormat.SD_JWT_VC.value
    try:
        claim_format = ClaimFormat(tag)
    except ValueError as exc:
        raise RecordParseError(
            f"parse_credential_record: unsupported claimFormat {tag!r}"
        ) from exc

    record_id = raw.get("id")
    if not isinstance(record_id, str) or not record_id:
        raise RecordParseError('parse_credential_record: "id" must be a non-empty string')

    created_at = _parse_datetime(raw.get("createdAt"), "createdAt")
    if created_at is None:
        created_at = datetime.now(tz=timezone.utc)

    metadata_raw = raw.get("openId4VcMetadata")
    common: dict[str, Any] = {
        "openid4vc_metadata": (
            parse_openid4vc_metadata(metadata_raw) if metadata_raw is not None else None
        ),
        "category": parse_credential_category(raw.get("category")),
        "refresh_metadata": (
            dict(raw["refreshMetadata"])
            if isinstance(raw.get("refreshMetadata"), Mapping)
            else None
        ),
    }

    if claim_format is ClaimFormat.SD_JWT_VC:
        claims = raw.get("claims")
        if not isinstance(claims, Mapping):
            raise RecordParseError('parse_credential_record: "claims" must be an object')
        type_metadata_raw = raw.get("typeMetadata")
        return SdJwtVcRecord(
            id=record_id,
            created_at=created_at,
            claims=dict(claims),
            type_metadata=(
                parse_sd_jwt_type_metadata(type_metadata_raw)
                if type_metadata_raw is not None
                else None
            ),
            **common,
        )

    if claim_format is ClaimFormat.MSO_MDOC:
        doc_type = raw.get("docType")
        if not isinstance(doc_type, str):
            raise RecordParseError('parse_credential_record: "docType" must be a string')
        namespaces = raw.get("namespaces", {})
        if not isinstance(namespaces, Mapping) or not all(
            isinstance(v, Mapping) for v in namespaces.values()
        ):
            raise RecordParseError(
                'parse_credential_record: "namespaces" must map names to objects'
            )
        validity = raw.get("validityInfo")
        if not isinstance(validity, Mapping):
            validity = {}
        return MdocRecord(
            id=record_id,
            created_at=created_at,
            doc_type=doc_type,
            namespaces={str(k): dict(v) for k, v in namespaces.items()},
            signed_at=_parse_datetime(validity.get("signed"), "validityInfo.signed"),
            valid_from=_parse_datetime(validity.get("validFrom"), "validityInfo.validFrom"),
            valid_until=_parse_datetime(validity.get("validUntil"), "validityInfo.validUntil"),
            **common,
        )

    credential = raw.get("credential")
    if not isinstance(credential, Mapping):
        raise RecordParseError('parse_credential_record: "credential" must be an object')
    return W3cCredentialRecord(
        id=record_id,
        created_at=created_at,
        credential=dict(credential),
        claim_format=claim_format,
        **common,
    )


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------


def _parse_display_list(raw: object, parse_one) -> list[DisplayEntry] | None:
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise RecordParseError("display must be a list of objects")
    return [parse_one(item) for item in raw]


def _parse_image(raw: object) -> DisplayImage | None:
    if not isinstance(raw, Mapping):
        return None
    url = raw.get("uri", raw.get("url"))
    if not isinstance(url, str):
        return None
    return DisplayImage(url=url, alt_text=_optional_str(raw.get("alt_text")))


def _optional_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _parse_datetime(value: object, field_name: str) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise RecordParseError(f"{field_name} must be an ISO 8601 string")
    try:
        return isoparse(value)
    except ValueError as exc:
        raise RecordParseError(f"{field_name}: invalid ISO 8601 value {value!r}") from exc
