# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""credential-display — display normalization for verifiable credentials.

Quickstart
----------
>>> from credential_display import parse_credential_record, get_credential_for_display
>>> record = parse_credential_record({
...     "claimFormat": "vc+sd-jwt",
...     "id": "abc",
...     "createdAt": "2024-01-01T00:00:00Z",
...     "claims": {"iss": "did:example:1", "vct": "UniversityDegree", "given_name": "Alice"},
... })
>>> get_credential_for_display(record).display.name
'University Degree'

Formatting a presentation request against held credentials:

>>> from credential_display import format_submission
>>> submission = format_submission(credentials_for_request)
>>> submission.are_all_satisfied
True
"""

from .agent import (
    AuthorizationRequestSnapshot,
    IdentityAgent,
    OfferSnapshot,
    ProofRequestView,
    get_credentials_for_proof_request,
    parse_invitation,
    resolve_credential_offer,
)
from .attributes import format_date, recursively_map_attributes
from .constraint_path import parse_path, simplify_path
from .disclosure import get_disclosed_attribute_paths
from .display import find_display, sanitize_string
from .normalize import (
    get_attributes_and_metadata_for_sd_jwt_payload,
    get_credential_for_display,
    get_disclosed_attribute_names_for_display,
    safe_calculate_jwk_thumbprint,
)
from .records import (
    CredentialRecord,
    MdocRecord,
    SdJwtVcRecord,
    W3cCredentialRecord,
    parse_credential_record,
)
from .submission import (
    ConstraintField,
    CredentialsForRequest,
    SubmissionCandidate,
    SubmissionRequirement,
    format_submission,
    requirements_from_presentation_definition,
    select_credentials_for_submission,
)
from .types import (
    ClaimFormat,
    CredentialDisplay,
    CredentialDisplayError,
    CredentialMetadata,
    DisclosedCredential,
    FormattedSubmission,
    InvitationError,
    IssuerDisplay,
    NormalizedCredential,
    PathSyntaxError,
    RecordParseError,
    RequestInputError,
    SatisfiedEntry,
    SubmissionError,
    UnsatisfiedEntry,
    UnsupportedFormatError,
    VerifierInfo,
)

__all__ = [
    # Normalization
    "get_credential_for_display",
    "get_attributes_and_metadata_for_sd_jwt_payload",
    "get_disclosed_attribute_names_for_display",
    "safe_calculate_jwk_thumbprint",
    "recursively_map_attributes",
    "format_date",
    "find_display",
    "sanitize_string",
    # Disclosure and constraint paths
    "get_disclosed_attribute_paths",
    "parse_path",
    "simplify_path",
    # Submission formatting
    "format_submission",
    "requirements_from_presentation_definition",
    "select_credentials_for_submission",
    "ConstraintField",
    "CredentialsForRequest",
    "SubmissionCandidate",
    "SubmissionRequirement",
    # Agent boundary
    "IdentityAgent",
    "OfferSnapshot",
    "AuthorizationRequestSnapshot",
    "ProofRequestView",
    "get_credentials_for_proof_request",
    "resolve_credential_offer",
    "parse_invitation",
    # Records
    "CredentialRecord",
    "SdJwtVcRecord",
    "W3cCredentialRecord",
    "MdocRecord",
    "parse_credential_record",
    # Core types
    "ClaimFormat",
    "CredentialDisplay",
    "CredentialMetadata",
    "DisclosedCredential",
    "FormattedSubmission",
    "IssuerDisplay",
    "NormalizedCredential",
    "SatisfiedEntry",
    "UnsatisfiedEntry",
    "VerifierInfo",
    # Exceptions
    "CredentialDisplayError",
    "UnsupportedFormatError",
    "SubmissionError",
    "RequestInputError",
    "InvitationError",
    "PathSyntaxError",
    "RecordParseError",
]
