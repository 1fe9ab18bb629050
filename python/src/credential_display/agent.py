# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Boundary with the identity agent that owns transport, keys and storage.

This package never talks to the network. Offers and authorization requests
are resolved by an agent implementing :class:`IdentityAgent`; the coroutines
here only call it, log, and turn the snapshot it returns into display types.
Retries and timeouts are the agent's concern.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Protocol
from urllib.parse import urlparse

from .records import OpenId4VcCredentialMetadata, extract_openid4vc_metadata
from .submission import CredentialsForRequest, format_submission
from .types import (
    DisplayImage,
    FormattedSubmission,
    InvitationError,
    RequestInputError,
    SubmissionError,
    VerifierInfo,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class OfferSnapshot:
    """A credential offer as resolved by the agent."""

    credential_offer: dict[str, Any]
    # credential_configuration_id -> configuration (format, display, order, ...)
    offered_credential_configurations: dict[str, dict[str, Any]]
    credential_issuer: str
    issuer_display: list[dict[str, Any]] | None = None

    def credential_metadata(self, configuration_id: str) -> OpenId4VcCredentialMetadata:
        """Display metadata to store with a credential issued from this offer.

        Raises
        ------
        KeyError
            If *configuration_id* is not offered.
        """
        return extract_openid4vc_metadata(
            self.offered_credential_configurations[configuration_id],
            self.credential_issuer,
            self.issuer_display,
        )


@dataclass(frozen=True)
class AuthorizationRequestSnapshot:
    """An OpenID4VP authorization request as resolved by the agent.

    ``credentials_for_request`` is ``None`` when the request carries no
    presentation-exchange definition.
    """

    payload: dict[str, Any]
    credentials_for_request: CredentialsForRequest | None = None
    transaction_data: list[Any] | None = None


class IdentityAgent(Protocol):
    """What this package needs from the identity agent."""

    async def resolve_offer(self, uri: str) -> OfferSnapshot: ...

    async def resolve_authorization_request(
        self, request: str | Mapping[str, Any]
    ) -> AuthorizationRequestSnapshot: ...


@dataclass(frozen=True)
class ProofRequestView:
    """Everything the UI needs to ask the holder about a proof request."""

    verifier: VerifierInfo
    formatted_submission: FormattedSubmission
    credentials_for_request: CredentialsForRequest
    authorization_request: dict[str, Any]
    origin: str | None = None
    transaction_data: list[Any] | None = None


class InvitationKind(str, Enum):
    OPENID_AUTHORIZATION_REQUEST = "openid-authorization-request"
    OPENID_CREDENTIAL_OFFER = "openid-credential-offer"


@dataclass(frozen=True)
class Invitation:
    kind: InvitationKind
    data: str | dict[str, Any]


async def resolve_credential_offer(agent: IdentityAgent, uri: str) -> OfferSnapshot:
    """Resolve a credential offer URI through the agent."""
    if not uri:
        raise RequestInputError("resolve_credential_offer: uri must not be empty")
    log.info("Receiving openid uri %s", uri)
    return await agent.resolve_offer(uri)


async def get_credentials_for_proof_request(
    agent: IdentityAgent,
    *,
    uri: str | None = None,
    request_payload: Mapping[str, Any] | None = None,
    origin: str | None = None,
    filter_keys: Iterable[str] = (),
) -> ProofRequestView:
    """Resolve an OpenID4VP request and format it for the holder.

    Parameters
    ----------
    agent:
        The identity agent resolving the request.
    uri:
        The request URI. Takes precedence over *request_payload*.
    request_payload:
        An already-parsed authorization request.
    origin:
        Web origin of the request, used as the verifier id when the request
        has no ``client_id``.
    filter_keys:
        Passed to :func:`~submission.format_submission`.

    Raises
    ------
    RequestInputError
        If neither *uri* nor *request_payload* is given.
    SubmissionError
        If the request carries no presentation-exchange definition.
    """
    request: str | Mapping[str, Any]
    if uri:
        request = uri
    elif request_payload is not None:
        request = request_payload
    else:
        raise RequestInputError(
            "get_credentials_for_proof_request: either request_payload or uri must be provided"
        )

    log.info("Receiving openid request %s", request if isinstance(request, str) else "<payload>")
    resolved = await agent.resolve_authorization_request(request)

    if resolved.credentials_for_request is None:
        raise SubmissionError(
            "get_credentials_for_proof_request: no presentation exchange found "
            "in authorization request"
        )

    return ProofRequestView(
        verifier=verifier_from_request(resolved.payload, origin),
        formatted_submission=format_submission(
            resolved.credentials_for_request, filter_keys=filter_keys
        ),
        credentials_for_request=resolved.credentials_for_request,
        authorization_request=resolved.payload,
        origin=origin,
        transaction_data=resolved.transaction_data,
    )


def verifier_from_request(payload: Mapping[str, Any], origin: str | None = None) -> VerifierInfo:
    """Derive verifier identity hints from an authorization request payload."""
    client_metadata = payload.get("client_metadata")
    if not isinstance(client_metadata, Mapping):
        client_metadata = {}

    client_id = payload.get("client_id")
    response_uri = payload.get("response_uri")
    logo_uri = client_metadata.get("logo_uri")
    client_name = client_metadata.get("client_name")

    return VerifierInfo(
        entity_id=client_id if isinstance(client_id, str) else f"web-origin:{origin}",
        host_name=_url_origin(response_uri) if isinstance(response_uri, str) else None,
        name=client_name if isinstance(client_name, str) else None,
        logo=DisplayImage(url=logo_uri) if isinstance(logo_uri, str) and logo_uri else None,
    )


def parse_invitation(data: str | Mapping[str, Any]) -> Invitation:
    """Classify an invitation payload the agent has already fetched.

    Text starting with ``ey`` is taken as a signed OpenID authorization
    request. Anything else must be a JSON object carrying
    ``credential_issuer`` (a credential offer).

    Raises
    ------
    InvitationError
        If the payload is not recognized.
    """
    if isinstance(data, str):
        if data.startswith("ey"):
            return Invitation(kind=InvitationKind.OPENID_AUTHORIZATION_REQUEST, data=data)
        try:
            data = json.loads(data)
        except json.JSONDecodeError as exc:
            raise InvitationError(f"parse_invitation: invalid JSON: {exc}") from exc

    if not isinstance(data, Mapping):
        raise InvitationError("parse_invitation: invitation not recognized")
    if "credential_issuer" in data:
        return Invitation(kind=InvitationKind.OPENID_CREDENTIAL_OFFER, data=dict(data))
    raise InvitationError("parse_invitation: invitation not recognized")


def _url_origin(url: str) -> str | None:
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"
