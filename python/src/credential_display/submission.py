# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Formatting of presentation-exchange requests for the holder.

:func:`format_submission` turns the requirements of a presentation request,
each with the candidate credentials the agent found for it, into a
:class:`~types.FormattedSubmission`:

- a requirement with at least one candidate becomes a
  :class:`~types.SatisfiedEntry` listing what each candidate would disclose;
- a requirement without candidates becomes an
  :class:`~types.UnsatisfiedEntry` listing the attribute paths the verifier
  asked for, so the UI can say what is missing.

Only the first ``needs_count`` candidates of a requirement are considered.
Entries are returned in requirement order.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from . import config
from .constraint_path import simplify_path
from .disclosure import get_disclosed_attribute_paths
from .normalize import (
    get_attributes_and_metadata_for_sd_jwt_payload,
    get_credential_for_display,
)
from .records import CredentialRecord, SdJwtVcRecord
from .types import (
    ClaimFormat,
    DisclosedCredential,
    FormattedSubmission,
    FormattedSubmissionEntry,
    SatisfiedEntry,
    SubmissionError,
    UnsatisfiedEntry,
)

log = logging.getLogger(__name__)

_URL_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")

_SD_JWT_FORMATS = frozenset({"vc+sd-jwt", "dc+sd-jwt"})


@dataclass(frozen=True)
class ConstraintField:
    """One ``constraints.fields`` entry of an input descriptor."""

    paths: list[str]
    filter: dict[str, Any] | None = None


@dataclass(frozen=True)
class SubmissionCandidate:
    """A held credential matching a requirement.

    ``disclosed_payload`` is the SD-JWT VC payload restricted to the claims
    that would be disclosed; it is ignored for other formats.
    """

    record: CredentialRecord
    disclosed_payload: dict[str, Any] | None = None


@dataclass(frozen=True)
class SubmissionRequirement:
    """A single input descriptor together with its candidate credentials."""

    input_descriptor_id: str
    needs_count: int = 1
    name: str | None = None
    purpose: str | None = None
    # Declared claim formats, e.g. ("vc+sd-jwt",) or ("mso_mdoc",).
    formats: tuple[str, ...] = ()
    constraint_fields: tuple[ConstraintField, ...] = ()
    candidates: tuple[SubmissionCandidate, ...] = ()
    # mdoc doc type; PEX requests conventionally use it as the descriptor id.
    doc_type: str | None = None

    @property
    def is_mdoc(self) -> bool:
        return ClaimFormat.MSO_MDOC.value in self.formats

    @property
    def constraint_field_paths(self) -> list[str]:
        """The first path of each constraint field, in declaration order."""
        return [f.paths[0] for f in self.constraint_fields if f.paths]


@dataclass(frozen=True)
class CredentialsForRequest:
    """All requirements of a presentation request."""

    requirements: list[SubmissionRequirement] = field(default_factory=list)
    name: str | None = None
    purpose: str | None = None


def format_submission(
    request: CredentialsForRequest,
    *,
    max_depth: int | None = None,
    filter_keys: Iterable[str] = (),
) -> FormattedSubmission:
    """Format a presentation request for display.

    Parameters
    ----------
    request:
        The requirements with their candidates, in request order.
    max_depth:
        Depth cap for disclosed attribute paths. Defaults to
        :data:`config.DISCLOSURE_MAX_DEPTH`.
    filter_keys:
        Keys whose presence in a requested path hides that path.

    Returns
    -------
    FormattedSubmission
        One entry per requirement, in the same order. Every entry is
        evaluated; ``are_all_satisfied`` is derived from all of them.

    Raises
    ------
    UnsupportedFormatError
        If a candidate carries a record outside the supported formats.
    """
    depth = config.DISCLOSURE_MAX_DEPTH if max_depth is None else max_depth
    filter_keys = tuple(filter_keys)

    entries: list[FormattedSubmissionEntry] = [
        _format_entry(requirement, depth, filter_keys)
        for requirement in request.requirements
    ]
    submission = FormattedSubmission(
        name=request.name or config.DEFAULT_SUBMISSION_NAME,
        purpose=request.purpose,
        entries=entries,
    )
    log.debug(
        "format_submission: %d entries, all satisfied: %s",
        len(entries),
        submission.are_all_satisfied,
    )
    return submission


def disclose_candidate(candidate: SubmissionCandidate, max_depth: int) -> DisclosedCredential:
    """Normalize a candidate and work out which attributes it discloses.

    For SD-JWT VCs only the disclosed payload counts (minus reserved claims);
    for every other format the whole credential is disclosed.
    """
    credential = get_credential_for_display(candidate.record)

    if isinstance(candidate.record, SdJwtVcRecord):
        payload = (
            candidate.disclosed_payload
            if candidate.disclosed_payload is not None
            else candidate.record.claims
        )
        view = get_attributes_and_metadata_for_sd_jwt_payload(payload)
        attributes, metadata = view.attributes, view.metadata
    else:
        attributes, metadata = credential.attributes, credential.metadata

    return DisclosedCredential(
        credential=credential,
        attributes=attributes,
        metadata=metadata,
        paths=get_disclosed_attribute_paths(attributes, max_depth),
    )


def requirements_from_presentation_definition(
    definition: Mapping[str, Any],
    candidates: Mapping[str, Sequence[SubmissionCandidate]],
    *,
    needs_counts: Mapping[str, int] | None = None,
) -> CredentialsForRequest:
    """Build :class:`CredentialsForRequest` from a PEX v2 definition.

    Parameters
    ----------
    definition:
        The JSON-decoded presentation definition.
    candidates:
        Candidate credentials per input descriptor id, as matched by the agent.
        Descriptors without an entry have no candidates.
    needs_counts:
        Optional count of credentials needed per input descriptor id
        (defaults to 1).

    Raises
    ------
    SubmissionError
        If the definition has no ``input_descriptors`` list or a descriptor
        has no ``id``.
    """
    descriptors = definition.get("input_descriptors")
    if not isinstance(descriptors, list):
        raise SubmissionError(
            "requirements_from_presentation_definition: "
            '"input_descriptors" must be a list'
        )

    default_formats = _format_keys(definition.get("format"))
    requirements: list[SubmissionRequirement] = []
    for descriptor in descriptors:
        if not isinstance(descriptor, Mapping) or not isinstance(descriptor.get("id"), str):
            raise SubmissionError(
                "requirements_from_presentation_definition: "
                'every input descriptor needs a string "id"'
            )
        descriptor_id = descriptor["id"]
        constraints = descriptor.get("constraints")
        raw_fields = constraints.get("fields") if isinstance(constraints, Mapping) else None

        requirements.append(
            SubmissionRequirement(
                input_descriptor_id=descriptor_id,
                needs_count=(needs_counts or {}).get(descriptor_id, 1),
                name=descriptor.get("name"),
                purpose=descriptor.get("purpose"),
                formats=_format_keys(descriptor.get("format")) or default_formats,
                constraint_fields=tuple(_parse_fields(raw_fields)),
                candidates=tuple(candidates.get(descriptor_id, ())),
            )
        )

    return CredentialsForRequest(
        requirements=requirements,
        name=definition.get("name"),
        purpose=definition.get("purpose"),
    )


def select_credentials_for_submission(
    request: CredentialsForRequest,
    selected: Mapping[str, str] | None = None,
) -> dict[str, list[CredentialRecord]]:
    """Choose the credential to present for each requirement.

    For each input descriptor the credential whose record id the caller put
    in *selected* is used; without a selection (or when the selected id is
    not among the candidates) the first candidate is used.

    Raises
    ------
    SubmissionError
        If any requirement has no candidate credential at all.
    """
    selected = selected or {}
    chosen: dict[str, list[CredentialRecord]] = {}

    for requirement in request.requirements:
        pool = requirement.candidates[: max(requirement.needs_count, 0)]
        if not pool:
            raise SubmissionError(
                f"select_credentials_for_submission: no credential available for "
                f"input descriptor {requirement.input_descriptor_id!r}"
            )
        wanted = selected.get(requirement.input_descriptor_id)
        record = next(
            (c.record for c in requirement.candidates if c.record.id == wanted),
            pool[0].record,
        )
        chosen[requirement.input_descriptor_id] = [record]

    return chosen


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------


def _format_entry(
    requirement: SubmissionRequirement,
    max_depth: int,
    filter_keys: tuple[str, ...],
) -> FormattedSubmissionEntry:
    # Alternates beyond needs_count are never considered.
    selected = requirement.candidates[: max(requirement.needs_count, 0)]

    if selected:
        return SatisfiedEntry(
            input_descriptor_id=requirement.input_descriptor_id,
            name=requirement.name,
            description=requirement.purpose,
            credentials=[disclose_candidate(c, max_depth) for c in selected],
        )

    mode = ClaimFormat.MSO_MDOC if requirement.is_mdoc else None
    requested: list[list[str]] = []
    for path in requirement.constraint_field_paths:
        simplified = simplify_path(path, mode, filter_keys)
        if simplified is None:
            continue
        keys = [segment for segment in simplified if segment is not None]
        if keys:
            requested.append(keys)

    return UnsatisfiedEntry(
        input_descriptor_id=requirement.input_descriptor_id,
        name=_unsatisfied_entry_name(requirement),
        description=requirement.purpose,
        requested_attribute_paths=requested,
    )


def _unsatisfied_entry_name(requirement: SubmissionRequirement) -> str | None:
    if requirement.name:
        return requirement.name
    if requirement.is_mdoc:
        return requirement.doc_type or requirement.input_descriptor_id

    vct = _requested_vct(requirement)
    return _URL_SCHEME.sub("", vct) if vct else None


def _requested_vct(requirement: SubmissionRequirement) -> str | None:
    # Only requirements that declare an SD-JWT format name themselves by vct;
    # the first field targeting $.vct decides.
    if not _SD_JWT_FORMATS.intersection(requirement.formats):
        return None
    constraint = next(
        (c for c in requirement.constraint_fields if "$.vct" in c.paths), None
    )
    if constraint is None or not constraint.filter:
        return None
    value = constraint.filter.get("const")
    if value is None:
        enum = constraint.filter.get("enum")
        value = enum[0] if isinstance(enum, list) and enum else None
    return value if isinstance(value, str) else None


def _format_keys(raw: object) -> tuple[str, ...]:
    if isinstance(raw, Mapping):
        return tuple(str(key) for key in raw)
    return ()


def _parse_fields(raw: object) -> list[ConstraintField]:
    if not isinstance(raw, list):
        return []
    fields: list[ConstraintField] = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        paths = item.get("path")
        if isinstance(paths, str):
            paths = [paths]
        if not isinstance(paths, list):
            continue
        raw_filter = item.get("filter")
        fields.append(
            ConstraintField(
                paths=[str(p) for p in paths],
                filter=dict(raw_filter) if isinstance(raw_filter, Mapping) else None,
            )
        )
    return fields
