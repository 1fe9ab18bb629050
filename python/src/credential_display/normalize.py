# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Normalization of credential records into :class:`~types.NormalizedCredential`.

One branch exists per record class in :data:`~records.CredentialRecord`:

``SdJwtVcRecord``
    Reserved claims are split from the visible ones; the reserved claims
    feed :class:`~types.CredentialMetadata`.
``W3cCredentialRecord``
    The first credential subject is surfaced. Credentials proved with the
    AnonCreds cryptosuite show the proof's verification method as type.
``MdocRecord``
    Namespaces and element identifiers are exposed as a two-level mapping.

Anything else raises :class:`~types.UnsupportedFormatError`.
"""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from cryptography.hazmat.primitives import hashes

from . import config
from .attributes import format_date, format_timestamp, recursively_map_attributes
from .display import (
    build_credential_display,
    build_issuer_display,
    identifier_credential_layer,
    openid_credential_layer,
    openid_issuer_layer,
    sanitize_string,
    type_metadata_layer,
    w3c_credential_layer,
    w3c_issuer_layer,
)
from .records import MdocRecord, SdJwtVcRecord, W3cCredentialRecord
from .types import (
    ClaimFormat,
    CredentialMetadata,
    DisclosedCredential,
    NormalizedCredential,
    UnsupportedFormatError,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SdJwtPayloadView:
    """Visible claims and metadata extracted from an SD-JWT VC payload."""

    attributes: dict[str, Any]
    raw_attributes: dict[str, Any]
    metadata: CredentialMetadata
    issued_at: datetime | None = None
    valid_from: datetime | None = None
    valid_until: datetime | None = None


def get_credential_for_display(record: object) -> NormalizedCredential:
    """Normalize a credential record for display.

    Parameters
    ----------
    record:
        An :class:`~records.SdJwtVcRecord`, :class:`~records.W3cCredentialRecord`
        or :class:`~records.MdocRecord`.

    Returns
    -------
    NormalizedCredential

    Raises
    ------
    UnsupportedFormatError
        If *record* is not one of the supported record classes.
    """
    if isinstance(record, SdJwtVcRecord):
        return _normalize_sd_jwt_vc(record)
    if isinstance(record, W3cCredentialRecord):
        return _normalize_w3c(record)
    if isinstance(record, MdocRecord):
        return _normalize_mdoc(record)
    raise UnsupportedFormatError(
        f"get_credential_for_display: unsupported record type {type(record).__name__}"
    )


def get_credential_for_display_id(record: object) -> str:
    """Return the display id, prefixed by record variant."""
    if isinstance(record, SdJwtVcRecord):
        return f"sd-jwt-vc-{record.id}"
    if isinstance(record, W3cCredentialRecord):
        return f"w3c-credential-{record.id}"
    if isinstance(record, MdocRecord):
        return f"mdoc-{record.id}"
    raise UnsupportedFormatError(
        f"get_credential_for_display_id: unsupported record type {type(record).__name__}"
    )


def get_attributes_and_metadata_for_sd_jwt_payload(
    payload: Mapping[str, Any],
) -> SdJwtPayloadView:
    """Split an SD-JWT VC payload into visible claims and metadata.

    The reserved claims (``_sd_alg``, ``_sd_hash``, ``iss``, ``vct``, ``cnf``,
    ``iat``, ``nbf``, ``exp``) never appear in the returned attributes.
    ``iat``, ``nbf`` and ``exp`` are seconds since the epoch and are formatted
    into ``issued_at``, ``valid_from`` and ``valid_until`` when present.

    The holder is ``cnf.kid`` when set, otherwise the JWK thumbprint of
    ``cnf.jwk``, otherwise absent.
    """
    visible = {
        key: value
        for key, value in payload.items()
        if key not in config.SD_JWT_RESERVED_CLAIMS
    }

    cnf = payload.get("cnf")
    holder: str | None = None
    if isinstance(cnf, Mapping):
        if isinstance(cnf.get("kid"), str):
            holder = cnf["kid"]
        elif cnf.get("jwk") is not None:
            holder = safe_calculate_jwk_thumbprint(cnf["jwk"])

    issued_at = _numeric_date(payload.get("iat"))
    valid_from = _numeric_date(payload.get("nbf"))
    valid_until = _numeric_date(payload.get("exp"))

    metadata = CredentialMetadata(
        type=str(payload.get("vct", "")),
        issuer=str(payload.get("iss", "")),
        holder=holder,
        issued_at=format_timestamp(issued_at) if issued_at is not None else None,
        valid_from=format_timestamp(valid_from) if valid_from is not None else None,
        valid_until=format_timestamp(valid_until) if valid_until is not None else None,
    )

    return SdJwtPayloadView(
        attributes={key: recursively_map_attributes(value) for key, value in visible.items()},
        raw_attributes=visible,
        metadata=metadata,
        issued_at=_to_datetime(issued_at),
        valid_from=_to_datetime(valid_from),
        valid_until=_to_datetime(valid_until),
    )


def safe_calculate_jwk_thumbprint(jwk: object) -> str | None:
    """Compute a JWK thumbprint URN, or ``None`` when it cannot be computed.

    The members ``k, e, crv, kty, n, x, y`` present on the key are serialized
    as compact JSON in that order, hashed with SHA-256 and base64url-encoded
    without padding. This function never raises.
    """
    try:
        if not isinstance(jwk, Mapping):
            return None
        canonical = {
            name: jwk[name]
            for name in config.JWK_THUMBPRINT_FIELDS
            if jwk.get(name) is not None
        }
        if not canonical:
            return None
        serialized = json.dumps(canonical, separators=(",", ":"), ensure_ascii=False)

        digest = hashes.Hash(hashes.SHA256())
        digest.update(serialized.encode("utf-8"))
        encoded = base64.urlsafe_b64encode(digest.finalize()).rstrip(b"=").decode("ascii")
    except Exception as exc:
        log.debug("safe_calculate_jwk_thumbprint: %s", exc)
        return None
    return f"{config.JWK_THUMBPRINT_URN_PREFIX}{encoded}"


def get_disclosed_attribute_names_for_display(disclosed: DisclosedCredential) -> list[str]:
    """Return de-duplicated labels for the disclosed attributes.

    For mdoc the namespace is dropped and the element identifier is used;
    for every other format the top-level key is used.
    """
    if disclosed.credential.claim_format is ClaimFormat.MSO_MDOC:
        candidates = [path[1] for path in disclosed.paths if len(path) > 1]
    else:
        candidates = [path[0] for path in disclosed.paths if path]

    names: list[str] = []
    for candidate in candidates:
        label = sanitize_string(candidate)
        if label not in names:
            names.append(label)
    return names


# ------------------------------------------------------------------
# Per-variant branches
# ------------------------------------------------------------------


def _normalize_sd_jwt_vc(record: SdJwtVcRecord) -> NormalizedCredential:
    view = get_attributes_and_metadata_for_sd_jwt_payload(record.claims)
    metadata = record.openid4vc_metadata

    issuer = build_issuer_display(
        openid_issuer_layer(metadata),
        issuer_id=metadata.issuer.id if metadata else None,
    )
    display = build_credential_display(
        type_metadata_layer(record.type_metadata),
        openid_credential_layer(metadata),
        identifier_credential_layer(record.claims.get("vct")),
        issuer=issuer,
    )

    return NormalizedCredential(
        id=get_credential_for_display_id(record),
        created_at=record.created_at,
        display=display,
        attributes=view.attributes,
        raw_attributes=view.raw_attributes,
        metadata=view.metadata,
        claim_format=ClaimFormat.SD_JWT_VC,
        category=record.category,
        has_refresh_token=record.refresh_metadata is not None,
    )


def _normalize_w3c(record: W3cCredentialRecord) -> NormalizedCredential:
    credential = record.credential
    metadata = record.openid4vc_metadata

    # Only the first subject of a multi-subject credential is surfaced.
    subject = credential.get("credentialSubject")
    subjects = subject if isinstance(subject, list) else [subject]
    first_subject = subjects[0] if subjects and isinstance(subjects[0], Mapping) else {}
    subject_ids = [
        s["id"] for s in subjects if isinstance(s, Mapping) and isinstance(s.get("id"), str)
    ]

    proof = credential.get("proof")
    first_proof = proof[0] if isinstance(proof, list) and proof else proof
    if not isinstance(first_proof, Mapping):
        first_proof = {}

    types = credential.get("type")
    if isinstance(types, str):
        types = [types]
    credential_type = str(types[-1]) if isinstance(types, list) and types else ""
    if first_proof.get("cryptosuite") == config.ANONCREDS_CRYPTOSUITE:
        credential_type = str(first_proof.get("verificationMethod") or credential_type)

    issuer_id = _w3c_issuer_id(credential.get("issuer"))
    issuance = credential.get("issuanceDate") or credential.get("validFrom")
    expiration = credential.get("expirationDate") or credential.get("validUntil")

    issuer = build_issuer_display(
        openid_issuer_layer(metadata),
        w3c_issuer_layer(credential),
        issuer_id=metadata.issuer.id if metadata else None,
    )
    display = build_credential_display(
        openid_credential_layer(metadata),
        w3c_credential_layer(credential),
        issuer=issuer,
    )

    issued_at = _safe_format_date(issuance)
    return NormalizedCredential(
        id=get_credential_for_display_id(record),
        created_at=record.created_at,
        display=display,
        attributes={
            key: recursively_map_attributes(value) for key, value in first_subject.items()
        },
        raw_attributes=dict(first_subject),
        metadata=CredentialMetadata(
            type=credential_type,
            issuer=issuer_id,
            holder=subject_ids[0] if subject_ids else None,
            issued_at=issued_at,
            valid_from=issued_at,
            valid_until=_safe_format_date(expiration),
        ),
        claim_format=record.claim_format,
        category=record.category,
        has_refresh_token=record.refresh_metadata is not None,
    )


def _normalize_mdoc(record: MdocRecord) -> NormalizedCredential:
    metadata = record.openid4vc_metadata
    raw_attributes = {namespace: dict(elements) for namespace, elements in record.namespaces.items()}

    issuer = build_issuer_display(
        openid_issuer_layer(metadata),
        issuer_id=metadata.issuer.id if metadata else None,
    )
    display = build_credential_display(
        openid_credential_layer(metadata),
        identifier_credential_layer(record.doc_type),
        issuer=issuer,
    )

    return NormalizedCredential(
        id=get_credential_for_display_id(record),
        created_at=record.created_at,
        display=display,
        attributes={
            namespace: recursively_map_attributes(elements)
            for namespace, elements in raw_attributes.items()
        },
        raw_attributes=raw_attributes,
        metadata=CredentialMetadata(
            type=record.doc_type,
            issuer=metadata.issuer.id if metadata else config.DEFAULT_ISSUER_NAME,
            issued_at=_safe_format_date(record.signed_at),
            valid_from=_safe_format_date(record.valid_from),
            valid_until=_safe_format_date(record.valid_until),
        ),
        claim_format=ClaimFormat.MSO_MDOC,
        category=record.category,
        has_refresh_token=record.refresh_metadata is not None,
    )


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------


def _numeric_date(value: object) -> int | float | None:
    # bool is an int subclass but never a NumericDate.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        datetime.fromtimestamp(value, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        log.debug("_numeric_date: timestamp out of range %r", value)
        return None
    return value


def _to_datetime(seconds: int | float | None) -> datetime | None:
    if seconds is None:
        return None
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def _w3c_issuer_id(issuer: object) -> str:
    if isinstance(issuer, str):
        return issuer
    if isinstance(issuer, Mapping) and isinstance(issuer.get("id"), str):
        return issuer["id"]
    return ""


def _safe_format_date(value: object) -> str | None:
    if not isinstance(value, (str, datetime)) or not value:
        return None
    try:
        return format_date(value)
    except (ValueError, OverflowError):
        log.debug("_safe_format_date: unparseable date %r", value)
        return None
