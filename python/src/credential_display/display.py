# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Display resolution for credential cards.

Display information comes from up to three sources, consulted in priority
order:

1. **Protocol metadata**: OpenID4VCI issuer/credential display entries or
   SD-JWT VC type metadata stored with the record.
2. **Embedded branding**: what the credential says about itself (JFF-style
   ``name``, ``credentialBranding`` and issuer objects in W3C credentials, the
   ``vct`` of an SD-JWT VC, the doc type of an mdoc).
3. **Generic fallback**: the issuer host name, then ``"Unknown"`` /
   ``"Credential"``.

Each source is expressed as a layer (:class:`IssuerDisplayLayer` or
:class:`CredentialDisplayLayer`) with every field optional. Layers are merged
field by field with :func:`merge_layers`; the first layer that sets a field
wins.
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass
from typing import Any, Mapping, Sequence, TypeVar
from urllib.parse import urlparse

from . import config
from .records import DisplayEntry, OpenId4VcCredentialMetadata, SdJwtTypeMetadata
from .types import CredentialDisplay, DisplayImage, IssuerDisplay

_LayerT = TypeVar("_LayerT")

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[\s_\-]+")


@dataclass(frozen=True)
class IssuerDisplayLayer:
    """One source of issuer display information."""

    name: str | None = None
    logo: DisplayImage | None = None
    domain: str | None = None


@dataclass(frozen=True)
class CredentialDisplayLayer:
    """One source of credential display information."""

    name: str | None = None
    description: str | None = None
    text_color: str | None = None
    background_color: str | None = None
    background_image: DisplayImage | None = None


def find_display(entries: Sequence[DisplayEntry] | None) -> DisplayEntry | None:
    """Pick the display entry to show from a list of localized entries.

    Selection order: the first entry whose locale starts with the preferred
    prefix (``"en-"`` by default), then the first entry without a locale, then
    the first entry. Returns ``None`` for a missing or empty list.
    """
    if not entries:
        return None

    for entry in entries:
        if entry.locale and entry.locale.startswith(config.PREFERRED_LOCALE_PREFIX):
            return entry
    for entry in entries:
        if not entry.locale:
            return entry
    return entries[0]


def merge_layers(*layers: _LayerT | None) -> _LayerT:
    """Merge display layers, highest priority first.

    For each field the first non-empty value wins. ``None`` layers are
    skipped. All layers must be instances of the same layer class.
    """
    present = [layer for layer in layers if layer is not None]
    if not present:
        raise ValueError("merge_layers: at least one layer is required")

    layer_type = type(present[0])
    merged: dict[str, Any] = {}
    for field in dataclasses.fields(layer_type):
        for layer in present:
            value = getattr(layer, field.name)
            if value:
                merged[field.name] = value
                break
    return layer_type(**merged)


def sanitize_string(value: str) -> str:
    """Turn an identifier into a human-readable label.

    ``"UniversityDegree"`` becomes ``"University Degree"`` and
    ``"given_name"`` becomes ``"Given name"``.
    """
    spaced = _CAMEL_BOUNDARY.sub(r"\1 \2", value)
    spaced = _SEPARATORS.sub(" ", spaced).strip()
    return spaced[:1].upper() + spaced[1:]


def get_host_name_from_url(url: str | None) -> str | None:
    """Return the host of an ``http(s)`` URL, or ``None`` for anything else."""
    if not url:
        return None
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https"):
        return None
    return parsed.hostname or None


# ------------------------------------------------------------------
# Protocol metadata layers
# ------------------------------------------------------------------


def openid_issuer_layer(
    metadata: OpenId4VcCredentialMetadata | None,
) -> IssuerDisplayLayer | None:
    """Issuer display from OpenID4VC metadata.

    When the issuer entry has no logo, the credential display logo is used.
    """
    if metadata is None:
        return None

    issuer_entry = find_display(metadata.issuer.display)
    credential_entry = find_display(metadata.credential.display)

    logo = _usable_image(issuer_entry.logo if issuer_entry else None)
    if logo is None and credential_entry is not None:
        logo = _usable_image(credential_entry.logo)

    return IssuerDisplayLayer(
        name=issuer_entry.name if issuer_entry else None,
        logo=logo,
        domain=get_host_name_from_url(metadata.issuer.id),
    )


def openid_credential_layer(
    metadata: OpenId4VcCredentialMetadata | None,
) -> CredentialDisplayLayer | None:
    if metadata is None:
        return None
    return _credential_layer_from_entry(find_display(metadata.credential.display))


def type_metadata_layer(
    type_metadata: SdJwtTypeMetadata | None,
) -> CredentialDisplayLayer | None:
    if type_metadata is None:
        return None
    return _credential_layer_from_entry(find_display(type_metadata.display))


# ------------------------------------------------------------------
# Embedded branding layers
# ------------------------------------------------------------------


def w3c_issuer_layer(credential: Mapping[str, Any]) -> IssuerDisplayLayer:
    """Issuer name and logo from a JFF-style issuer object, if any."""
    issuer = credential.get("issuer")
    if not isinstance(issuer, Mapping):
        return IssuerDisplayLayer()

    logo: DisplayImage | None = None
    image = issuer.get("image")
    if isinstance(issuer.get("logoUrl"), str):
        logo = DisplayImage(url=issuer["logoUrl"])
    elif isinstance(image, str):
        logo = DisplayImage(url=image)
    elif isinstance(image, Mapping) and isinstance(image.get("id"), str):
        logo = DisplayImage(url=image["id"])

    name = issuer.get("name")
    return IssuerDisplayLayer(name=name if isinstance(name, str) else None, logo=logo)


def w3c_credential_layer(credential: Mapping[str, Any]) -> CredentialDisplayLayer:
    """Credential name and color embedded in a W3C credential.

    Without an explicit ``name``, the last declared type is sanitized into a
    label, unless it is a URL.
    """
    name = credential.get("name")
    if not isinstance(name, str) or not name:
        name = None
        types = credential.get("type")
        if isinstance(types, list) and len(types) > 1:
            last_type = types[-1]
            if isinstance(last_type, str) and not last_type.startswith("http"):
                name = sanitize_string(last_type)

    branding = credential.get("credentialBranding")
    background_color = (
        branding.get("backgroundColor") if isinstance(branding, Mapping) else None
    )

    return CredentialDisplayLayer(
        name=name,
        background_color=background_color if isinstance(background_color, str) else None,
    )


def identifier_credential_layer(identifier: object) -> CredentialDisplayLayer:
    """Name derived from a type identifier (``vct`` or mdoc doc type)."""
    if isinstance(identifier, str) and identifier:
        return CredentialDisplayLayer(name=sanitize_string(identifier))
    return CredentialDisplayLayer()


# ------------------------------------------------------------------
# Final assembly with generic fallbacks
# ------------------------------------------------------------------


def build_issuer_display(
    *layers: IssuerDisplayLayer | None,
    issuer_id: str | None = None,
) -> IssuerDisplay:
    """Merge issuer layers and apply the generic fallback.

    The host name of *issuer_id* is the last-resort name before ``"Unknown"``.
    """
    merged = merge_layers(*layers, IssuerDisplayLayer())
    name = merged.name or get_host_name_from_url(issuer_id) or config.DEFAULT_ISSUER_NAME
    return IssuerDisplay(name=name, logo=merged.logo, domain=merged.domain)


def build_credential_display(
    *layers: CredentialDisplayLayer | None,
    issuer: IssuerDisplay,
) -> CredentialDisplay:
    merged = merge_layers(*layers, CredentialDisplayLayer())
    return CredentialDisplay(
        name=merged.name or config.DEFAULT_CREDENTIAL_NAME,
        issuer=issuer,
        description=merged.description,
        text_color=merged.text_color,
        background_color=merged.background_color,
        background_image=merged.background_image,
    )


def _credential_layer_from_entry(entry: DisplayEntry | None) -> CredentialDisplayLayer:
    if entry is None:
        return CredentialDisplayLayer()
    return CredentialDisplayLayer(
        name=entry.name,
        description=entry.description,
        text_color=entry.text_color,
        background_color=entry.background_color,
        background_image=_usable_image(entry.background_image),
    )


def _usable_image(image: DisplayImage | None) -> DisplayImage | None:
    # An image without a URL is treated as absent.
    if image is None or not image.url:
        return None
    return image
