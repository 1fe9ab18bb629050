"""Shared fixtures: one record per supported claim format."""

from datetime import datetime, timezone

import pytest

from credential_display.records import (
    MdocRecord,
    SdJwtVcRecord,
    W3cCredentialRecord,
    parse_openid4vc_metadata,
)
from credential_display.types import ClaimFormat

CREATED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def openid_metadata():
    return parse_openid4vc_metadata(
        {
            "credential": {
                "display": [
                    {"name": "Diplôme", "locale": "fr-FR"},
                    {
                        "name": "University Diploma",
                        "locale": "en-US",
                        "background_color": "#12107c",
                        "text_color": "#ffffff",
                        "logo": {"uri": "https://uni.example/card-logo.png"},
                    },
                ]
            },
            "issuer": {
                "id": "https://issuer.uni.example/oid4vci",
                "display": [{"name": "Example University", "locale": "en-US"}],
            },
        }
    )


@pytest.fixture
def sd_jwt_claims():
    return {
        "_sd_alg": "sha-256",
        "iss": "did:example:1",
        "vct": "UniversityDegree",
        "cnf": {"kid": "key-1"},
        "iat": 1700000000,
        "given_name": "Alice",
        "address": {"locality": "Berlin", "country": "DE"},
    }


@pytest.fixture
def sd_jwt_record(sd_jwt_claims):
    return SdJwtVcRecord(id="sd1", created_at=CREATED_AT, claims=sd_jwt_claims)


@pytest.fixture
def w3c_credential():
    return {
        "@context": ["https://www.w3.org/2018/credentials/v1"],
        "type": ["VerifiableCredential", "OpenBadgeCredential"],
        "issuer": {
            "id": "did:web:badges.example",
            "name": "Badge Issuer",
            "image": {"id": "https://badges.example/logo.png"},
        },
        "issuanceDate": "2023-05-01T10:00:00Z",
        "expirationDate": "2026-05-01T10:00:00Z",
        "credentialSubject": {"id": "did:key:holder", "achievement": "Python"},
        "proof": {"type": "Ed25519Signature2020", "verificationMethod": "did:web:badges.example#key-1"},
    }


@pytest.fixture
def w3c_record(w3c_credential):
    return W3cCredentialRecord(
        id="w1",
        created_at=CREATED_AT,
        credential=w3c_credential,
        claim_format=ClaimFormat.LDP_VC,
    )


@pytest.fixture
def mdoc_record():
    return MdocRecord(
        id="m1",
        created_at=CREATED_AT,
        doc_type="org.iso.18013.5.1.mDL",
        namespaces={
            "org.iso.18013.5.1": {
                "family_name": "Mustermann",
                "given_name": "Erika",
                "birth_date": "1984-01-26",
            }
        },
        valid_from=datetime(2024, 1, 1, tzinfo=timezone.utc),
        valid_until=datetime(2029, 1, 1, tzinfo=timezone.utc),
    )
