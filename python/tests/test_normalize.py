"""Tests for claim-format normalization."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from credential_display.normalize import (
    get_attributes_and_metadata_for_sd_jwt_payload,
    get_credential_for_display,
    get_disclosed_attribute_names_for_display,
    safe_calculate_jwk_thumbprint,
)
from credential_display.records import (
    SdJwtTypeMetadata,
    SdJwtVcRecord,
    parse_type_metadata_display,
)
from credential_display.types import (
    ClaimFormat,
    CredentialCategory,
    CredentialMetadata,
    DisclosedCredential,
    UnsupportedFormatError,
)

RESERVED = ("_sd_alg", "_sd_hash", "iss", "vct", "cnf", "iat", "exp", "nbf")

EC_JWK = {
    "kty": "EC",
    "crv": "P-256",
    "x": "f83OJ3D2xF1Bg8vub9tLe1gHMzV76e8Tus9uPHvRVEU",
    "y": "x_FEzRu9m36HLN_tue659LNpXW6pCyStikYjKIWI5a0",
}


class TestSdJwtPayload:
    def test_scenario_metadata_and_visible_claims(self):
        view = get_attributes_and_metadata_for_sd_jwt_payload(
            {
                "iss": "did:example:1",
                "vct": "UniversityDegree",
                "cnf": {"kid": "key-1"},
                "iat": 1700000000,
                "given_name": "Alice",
            }
        )
        assert view.metadata == CredentialMetadata(
            type="UniversityDegree",
            issuer="did:example:1",
            holder="key-1",
            issued_at="November 14, 2023",
        )
        assert view.attributes == {"given_name": "Alice"}
        assert view.issued_at == datetime.fromtimestamp(1700000000, tz=timezone.utc)

    def test_reserved_claims_never_visible(self):
        payload = {key: "x" for key in RESERVED}
        payload.update({"iat": 1, "exp": 2, "nbf": 3, "cnf": {}, "email": "a@b.c"})
        view = get_attributes_and_metadata_for_sd_jwt_payload(payload)
        assert not set(RESERVED) & set(view.attributes)
        assert not set(RESERVED) & set(view.raw_attributes)
        assert view.attributes == {"email": "a@b.c"}

    def test_exp_and_nbf_formatted(self):
        view = get_attributes_and_metadata_for_sd_jwt_payload(
            {"iss": "i", "vct": "v", "exp": 1700000000, "nbf": 1700000000}
        )
        assert view.metadata.valid_until == "November 14, 2023"
        assert view.metadata.valid_from == "November 14, 2023"
        assert view.metadata.issued_at is None

    def test_holder_from_jwk_thumbprint(self):
        view = get_attributes_and_metadata_for_sd_jwt_payload(
            {"iss": "i", "vct": "v", "cnf": {"jwk": EC_JWK}}
        )
        assert view.metadata.holder == safe_calculate_jwk_thumbprint(EC_JWK)

    def test_no_cnf_means_no_holder(self):
        view = get_attributes_and_metadata_for_sd_jwt_payload({"iss": "i", "vct": "v"})
        assert view.metadata.holder is None

    def test_out_of_range_timestamps_are_dropped(self):
        view = get_attributes_and_metadata_for_sd_jwt_payload(
            {"iss": "i", "vct": "v", "iat": float("nan"), "nbf": -(10**20), "exp": 10**15}
        )
        assert view.metadata.issued_at is None
        assert view.metadata.valid_from is None
        assert view.metadata.valid_until is None
        assert view.valid_until is None

    def test_boolean_timestamp_is_ignored(self):
        view = get_attributes_and_metadata_for_sd_jwt_payload({"iss": "i", "vct": "v", "iat": True})
        assert view.metadata.issued_at is None


class TestJwkThumbprint:
    def test_format(self):
        thumbprint = safe_calculate_jwk_thumbprint(EC_JWK)
        prefix = "urn:ietf:params:oauth:jwk-thumbprint:sha-256:"
        assert thumbprint.startswith(prefix)
        digest = thumbprint[len(prefix):]
        # 32 bytes base64url-encoded without padding.
        assert len(digest) == 43
        assert "=" not in digest

    def test_independent_of_member_order_and_extra_members(self):
        reordered = dict(reversed(list(EC_JWK.items())))
        reordered.update({"kid": "k1", "use": "sig"})
        assert safe_calculate_jwk_thumbprint(reordered) == safe_calculate_jwk_thumbprint(EC_JWK)

    def test_different_keys_differ(self):
        other = dict(EC_JWK, x="AAAA")
        assert safe_calculate_jwk_thumbprint(other) != safe_calculate_jwk_thumbprint(EC_JWK)

    @pytest.mark.parametrize("jwk", [None, "not-a-key", {}, {"kid": "only"}, {"x": object()}])
    def test_failures_yield_none(self, jwk):
        assert safe_calculate_jwk_thumbprint(jwk) is None


class TestSdJwtBranch:
    def test_normalized_shape(self, sd_jwt_record):
        credential = get_credential_for_display(sd_jwt_record)
        assert credential.id == "sd-jwt-vc-sd1"
        assert credential.claim_format is ClaimFormat.SD_JWT_VC
        assert credential.display.name == "University Degree"
        assert credential.display.issuer.name == "Unknown"
        assert credential.attributes == {
            "given_name": "Alice",
            "address": {"locality": "Berlin", "country": "DE"},
        }
        assert credential.metadata.holder == "key-1"
        assert credential.has_refresh_token is False

    def test_type_metadata_name_wins(self, sd_jwt_record, openid_metadata):
        type_metadata = SdJwtTypeMetadata(
            vct="UniversityDegree",
            display=[
                parse_type_metadata_display(
                    {
                        "lang": "en-US",
                        "name": "Degree",
                        "rendering": {"simple": {"background_color": "#000000"}},
                    }
                )
            ],
        )
        record = replace(
            sd_jwt_record, type_metadata=type_metadata, openid4vc_metadata=openid_metadata
        )
        credential = get_credential_for_display(record)
        assert credential.display.name == "Degree"
        assert credential.display.background_color == "#000000"
        # Fields missing from type metadata come from the issuer metadata.
        assert credential.display.text_color == "#ffffff"
        assert credential.display.issuer.name == "Example University"
        assert credential.display.issuer.domain == "issuer.uni.example"

    def test_issuer_metadata_name_before_vct(self, sd_jwt_record, openid_metadata):
        record = replace(sd_jwt_record, openid4vc_metadata=openid_metadata)
        assert get_credential_for_display(record).display.name == "University Diploma"

    def test_literal_fallback_without_vct(self, sd_jwt_record):
        record = SdJwtVcRecord(id="x", created_at=sd_jwt_record.created_at, claims={"iss": "i"})
        assert get_credential_for_display(record).display.name == "Credential"

    def test_category_and_refresh_token(self, sd_jwt_record):
        category = CredentialCategory(credential_category="DOC")
        record = replace(sd_jwt_record, category=category, refresh_metadata={"token": "t"})
        credential = get_credential_for_display(record)
        assert credential.category == category
        assert credential.has_refresh_token is True


class TestW3cBranch:
    def test_normalized_shape(self, w3c_record):
        credential = get_credential_for_display(w3c_record)
        assert credential.id == "w3c-credential-w1"
        assert credential.claim_format is ClaimFormat.LDP_VC
        assert credential.metadata == CredentialMetadata(
            type="OpenBadgeCredential",
            issuer="did:web:badges.example",
            holder="did:key:holder",
            issued_at="May 1, 2023",
            valid_from="May 1, 2023",
            valid_until="May 1, 2026",
        )
        assert credential.attributes == {"id": "did:key:holder", "achievement": "Python"}
        assert credential.display.name == "Open Badge Credential"
        assert credential.display.issuer.name == "Badge Issuer"

    def test_first_subject_only(self, w3c_record, w3c_credential):
        subjects = [{"id": "did:key:first", "n": 1}, {"id": "did:key:second", "n": 2}]
        record = replace(w3c_record, credential=dict(w3c_credential, credentialSubject=subjects))
        credential = get_credential_for_display(record)
        assert credential.attributes == {"id": "did:key:first", "n": 1}
        assert credential.metadata.holder == "did:key:first"

    def test_anoncreds_type_is_verification_method(self, w3c_record, w3c_credential):
        proof = [
            {
                "type": "DataIntegrityProof",
                "cryptosuite": "anoncreds-2023",
                "verificationMethod": "did:indy:sovrin:cred-def-1",
            }
        ]
        record = replace(w3c_record, credential=dict(w3c_credential, proof=proof))
        assert get_credential_for_display(record).metadata.type == "did:indy:sovrin:cred-def-1"

    def test_missing_expiration(self, w3c_record, w3c_credential):
        credential = dict(w3c_credential)
        del credential["expirationDate"]
        record = replace(w3c_record, credential=credential)
        assert get_credential_for_display(record).metadata.valid_until is None

    def test_jwt_vc_keeps_claim_format(self, w3c_record):
        record = replace(w3c_record, claim_format=ClaimFormat.JWT_VC)
        assert get_credential_for_display(record).claim_format is ClaimFormat.JWT_VC


class TestMdocBranch:
    def test_normalized_shape(self, mdoc_record):
        credential = get_credential_for_display(mdoc_record)
        assert credential.id == "mdoc-m1"
        assert credential.claim_format is ClaimFormat.MSO_MDOC
        assert credential.metadata.type == "org.iso.18013.5.1.mDL"
        assert credential.metadata.issuer == "Unknown"
        assert credential.metadata.valid_until == "January 1, 2029"
        assert credential.attributes["org.iso.18013.5.1"]["birth_date"] == "January 26, 1984"
        assert credential.raw_attributes["org.iso.18013.5.1"]["birth_date"] == "1984-01-26"

    def test_validity_outside_utc_range_is_dropped(self, mdoc_record):
        far = datetime(9999, 12, 31, 23, 0, tzinfo=timezone(timedelta(hours=-5)))
        credential = get_credential_for_display(replace(mdoc_record, valid_until=far))
        assert credential.metadata.valid_until is None


class TestUnsupportedFormat:
    def test_unknown_record_raises(self):
        with pytest.raises(UnsupportedFormatError):
            get_credential_for_display({"claimFormat": "vc+sd-jwt"})


class TestDisclosedAttributeNames:
    def _disclosed(self, credential, paths):
        return DisclosedCredential(
            credential=credential, attributes={}, metadata=None, paths=paths
        )

    def test_mdoc_uses_element_identifier(self, mdoc_record):
        credential = get_credential_for_display(mdoc_record)
        disclosed = self._disclosed(
            credential,
            [["org.iso.18013.5.1", "given_name"], ["org.iso.18013.5.1", "family_name"]],
        )
        assert get_disclosed_attribute_names_for_display(disclosed) == [
            "Given name",
            "Family name",
        ]

    def test_other_formats_use_top_level_keys(self, sd_jwt_record):
        credential = get_credential_for_display(sd_jwt_record)
        disclosed = self._disclosed(
            credential, [["address", "locality"], ["address", "country"], ["given_name"]]
        )
        assert get_disclosed_attribute_names_for_display(disclosed) == ["Address", "Given name"]
