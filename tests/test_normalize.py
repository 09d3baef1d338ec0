"""
Holder / Resource Normalizer Tests

Test Coverage:
- Digest recognition (SHA-256, multihash hex, base58 CIDv0)
- ipfsUri scheme checks and canonicalization
- Mirror defaults and web2 mirror policy
- Holder id checks
- Inputs are never mutated
"""

from __future__ import annotations

import copy
import logging

import pytest

from synet_credential.config import ValidatorConfig
from synet_credential.errors import ErrorCode, MalformedResource, MissingRequiredField, TypeMismatch
from synet_credential.models import CredentialType
from synet_credential.normalize import (
    normalize_delegation,
    normalize_holder,
    normalize_resource,
    normalize_subject,
)


class TestResourceHash:
    """Test format-only digest checks."""

    def test_not_a_digest_is_malformed(self, resource):
        resource["hash"] = "not-a-digest"
        with pytest.raises(MalformedResource) as exc:
            normalize_resource(resource)
        assert exc.value.rule is ErrorCode.MALFORMED_RESOURCE
        assert exc.value.path == "verifiableResource.hash"
        assert "not-a-digest" in exc.value.failure.value

    def test_bare_sha256(self, resource, sha256_hello):
        assert normalize_resource(resource)["hash"] == sha256_hello

    def test_prefixed_sha256(self, resource, sha256_hello):
        resource["hash"] = f"  sha256:{sha256_hello} "
        assert normalize_resource(resource)["hash"] == f"sha256:{sha256_hello}"

    def test_multihash_hex(self, resource, sha256_hello):
        resource["hash"] = "1220" + sha256_hello
        normalize_resource(resource)

    def test_multihash_base58(self, resource, cid_v0):
        resource["hash"] = cid_v0
        normalize_resource(resource)

    @pytest.mark.parametrize("digest", [
        "1220abcd",             # truncated sha2-256 multihash
        "5520" + "ab" * 32,     # unknown function code
        "abc",                  # odd-length hex
        "sha256:1234",          # prefix with short digest
        "",
    ])
    def test_rejected_digests(self, resource, digest):
        resource["hash"] = digest
        with pytest.raises(MalformedResource):
            normalize_resource(resource)

    def test_missing_hash(self, resource):
        del resource["hash"]
        with pytest.raises(MissingRequiredField) as exc:
            normalize_resource(resource)
        assert exc.value.path == "verifiableResource.hash"

    def test_non_string_hash(self, resource):
        resource["hash"] = 1234
        with pytest.raises(TypeMismatch):
            normalize_resource(resource)


class TestResourceUri:
    """Test ipfsUri canonicalization."""

    def test_scheme_lowercased_and_trimmed(self, resource, cid_v0):
        resource["ipfsUri"] = f"  IPFS://{cid_v0}  "
        assert normalize_resource(resource)["ipfsUri"] == f"ipfs://{cid_v0}"

    @pytest.mark.parametrize("uri", ["https://example.org/file", "ipfs://", "Qm-no-scheme"])
    def test_rejected_uris(self, resource, uri):
        resource["ipfsUri"] = uri
        with pytest.raises(MalformedResource) as exc:
            normalize_resource(resource)
        assert exc.value.path == "verifiableResource.ipfsUri"

    def test_extra_schemes_from_config(self, resource):
        resource["ipfsUri"] = "ipns://k51qzi5uqu5dlvj2"
        config = ValidatorConfig(ipfs_schemes=("ipfs", "ipns"))
        assert normalize_resource(resource, config=config)["ipfsUri"] == "ipns://k51qzi5uqu5dlvj2"


class TestMirrors:
    """Test mirror defaults and web2 policy."""

    def test_absent_mirrors_become_empty_list(self, resource):
        del resource["mirrors"]
        assert normalize_resource(resource)["mirrors"] == []

    def test_null_mirrors_become_empty_list(self, resource):
        resource["mirrors"] = None
        assert normalize_resource(resource)["mirrors"] == []

    def test_mirrors_trimmed_in_order(self, resource):
        resource["mirrors"] = [" ar://one ", "ipns://two"]
        assert normalize_resource(resource)["mirrors"] == ["ar://one", "ipns://two"]

    def test_web2_mirror_warns_by_default(self, resource, caplog):
        resource["mirrors"] = ["https://cdn.example.org/blob"]
        with caplog.at_level(logging.WARNING, logger="synet_credential.normalize"):
            result = normalize_resource(resource)
        assert result["mirrors"] == ["https://cdn.example.org/blob"]
        assert "Web2 mirror" in caplog.text

    def test_web2_mirror_allowed_silently(self, resource, caplog):
        resource["mirrors"] = ["http://cdn.example.org/blob"]
        with caplog.at_level(logging.WARNING, logger="synet_credential.normalize"):
            normalize_resource(resource, config=ValidatorConfig(web2_mirrors="allow"))
        assert caplog.text == ""

    def test_web2_mirror_rejected(self, resource):
        resource["mirrors"] = ["ar://ok", "https://cdn.example.org/blob"]
        with pytest.raises(MalformedResource) as exc:
            normalize_resource(resource, config=ValidatorConfig(web2_mirrors="reject"))
        assert exc.value.path == "verifiableResource.mirrors[1]"

    def test_mirrors_must_be_a_list(self, resource):
        resource["mirrors"] = "ar://one"
        with pytest.raises(TypeMismatch):
            normalize_resource(resource)

    def test_empty_mirror(self, resource):
        resource["mirrors"] = ["   "]
        with pytest.raises(MalformedResource):
            normalize_resource(resource)


class TestHolder:
    """Test holder id checks."""

    def test_id_trimmed_and_extras_kept(self):
        holder = normalize_holder({"id": " did:synet:alice ", "role": "operator"})
        assert holder == {"id": "did:synet:alice", "role": "operator"}

    def test_blank_id_is_malformed(self):
        with pytest.raises(MalformedResource) as exc:
            normalize_holder({"id": "   "}, "credentialSubject.holder")
        assert exc.value.path == "credentialSubject.holder.id"

    def test_missing_id(self):
        with pytest.raises(MissingRequiredField):
            normalize_holder({"name": "nobody"})

    def test_non_string_id(self):
        with pytest.raises(TypeMismatch):
            normalize_holder({"id": 7})

    def test_holder_must_be_object(self):
        with pytest.raises(TypeMismatch) as exc:
            normalize_holder("did:synet:alice", "credentialSubject.issuedBy")
        assert exc.value.path == "credentialSubject.issuedBy"


class TestSubjectNormalization:
    """Test registry-driven walk over a subject."""

    def test_nested_structures_normalized(self, subjects):
        subject = subjects[CredentialType.DATA_ASSET]
        subject["licensedBy"] = {"id": "  did:synet:root "}
        del subject["verifiableResource"]["mirrors"]
        result = normalize_subject(CredentialType.DATA_ASSET, subject)
        assert result["licensedBy"]["id"] == "did:synet:root"
        assert result["verifiableResource"]["mirrors"] == []

    def test_holder_list_paths(self, subjects):
        subject = subjects[CredentialType.INTELLIGENCE_AUTHORIZATION]
        subject["witnesses"][1] = {"id": ""}
        with pytest.raises(MalformedResource) as exc:
            normalize_subject(CredentialType.INTELLIGENCE_AUTHORIZATION, subject)
        assert exc.value.path == "credentialSubject.witnesses[1].id"

    def test_delegation_holders(self):
        delegation = normalize_delegation({
            "id": "dlg-1",
            "delegatedBy": {"id": " a "},
            "delegatedTo": {"id": "b"},
            "validFrom": "2026-01-01T00:00:00Z",
            "validUntil": "2026-06-01T00:00:00Z",
        })
        assert delegation["delegatedBy"] == {"id": "a"}

    def test_input_not_mutated(self, subjects):
        subject = subjects[CredentialType.DATA_ASSET]
        subject["holder"] = {"id": " padded "}
        before = copy.deepcopy(subject)
        normalize_subject(CredentialType.DATA_ASSET, subject)
        assert subject == before

    def test_attribute_name_refused(self, subjects):
        subject = subjects[CredentialType.IP]
        subject["issued_by"] = subject.pop("issuedBy")
        with pytest.raises(TypeMismatch) as exc:
            normalize_subject(CredentialType.IP, subject)
        assert exc.value.path == "credentialSubject.issued_by"

    def test_attribute_name_refused_in_resource(self, resource):
        resource["ipfs_uri"] = resource.pop("ipfsUri")
        with pytest.raises(TypeMismatch) as exc:
            normalize_resource(resource, "verifiableResource")
        assert exc.value.path == "verifiableResource.ipfs_uri"

    def test_attribute_name_refused_in_delegation(self):
        with pytest.raises(TypeMismatch) as exc:
            normalize_delegation({
                "id": "dlg-1",
                "delegated_by": {"id": " "},
                "delegatedTo": {"id": "b"},
                "validFrom": "2026-01-01T00:00:00Z",
                "validUntil": "2026-06-01T00:00:00Z",
            }, "delegated")
        assert exc.value.path == "delegated.delegated_by"
