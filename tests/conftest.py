"""Shared fixtures: one well-formed subject per credential type plus an envelope builder."""

from __future__ import annotations

import copy

import pytest

from synet_credential.credential import BASE_CREDENTIAL_TYPE, DEFAULT_CONTEXT
from synet_credential.models import CredentialType

SHA256_HELLO = "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"
CID_V0 = "QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"

ALICE = {"id": "did:synet:alice", "name": "Alice"}
ROOT = {"id": "did:synet:root", "name": "Synet Root"}
GATEWAY = {"id": "did:synet:gw-eu-1"}

RESOURCE = {
    "ipfsUri": f"ipfs://{CID_V0}",
    "hash": SHA256_HELLO,
    "mirrors": ["ar://a1b2c3"],
}

SUBJECTS = {
    CredentialType.IDENTITY: {
        "holder": ALICE,
        "issuedBy": ROOT,
        "scope": ["login"],
    },
    CredentialType.ROOT_IDENTITY: {
        "holder": ROOT,
        "issuedBy": ROOT,
        "networkId": "synet-main",
        "poolCidr": "10.0.0.0/8",
        "url": "https://synthetism.org",
    },
    CredentialType.GATEWAY_IDENTITY: {
        "holder": GATEWAY,
        "issuedBy": ROOT,
        "networkId": "synet-main",
        "regionId": "eu-1",
        "publicKeyHex": "ab12cd34",
    },
    CredentialType.MARKET_IDENTITY: {
        "holder": ALICE,
        "issuedBy": ROOT,
        "marketId": "mkt-compute",
        "title": "Compute market",
        "description": "GPU hours",
    },
    CredentialType.AUTHORIZATION: {
        "holder": ALICE,
        "authorizedBy": ROOT,
        "scope": "network:join",
    },
    CredentialType.INTELLIGENCE_AUTHORIZATION: {
        "holder": {"id": "did:synet:agent-7"},
        "authorizedBy": ALICE,
        "intelligence": "AI",
        "witnesses": [ROOT, GATEWAY],
        "certifications": ["safety-v1"],
    },
    CredentialType.GATEWAY_AUTHORIZATION: {
        "holder": GATEWAY,
        "authorizedBy": ROOT,
        "networkId": "synet-main",
        "regionId": "eu-1",
        "ip": "10.1.0.1",
        "cidr": "10.1.0.0/16",
        "ipPoolId": "pool-eu-1",
        "validUntil": "2027-01-01T00:00:00Z",
    },
    CredentialType.FUNGIBLE_ASSET: {
        "holder": ALICE,
        "issuedBy": ROOT,
        "quantity": 10,
        "totalSupply": 1000,
    },
    CredentialType.NON_FUNGIBLE_ASSET: {
        "holder": ALICE,
        "issuedBy": ROOT,
        "uniqueIdentifier": "nft-0007",
    },
    CredentialType.DATA_ASSET: {
        "holder": ALICE,
        "issuedBy": ROOT,
        "licensedBy": ROOT,
        "scope": ["analytics"],
        "verifiableResource": RESOURCE,
    },
    CredentialType.IP_POOL: {
        "holder": GATEWAY,
        "issuedBy": ROOT,
        "networkId": "synet-main",
        "cidr": "10.1.0.0/16",
        "regionId": "eu-1",
    },
    CredentialType.IP: {
        "holder": ALICE,
        "issuedBy": GATEWAY,
        "networkId": "synet-main",
        "ip": "10.1.0.42",
    },
    CredentialType.POLICY: {
        "holder": ALICE,
        "issuedBy": ROOT,
        "schemaUri": "https://synthetism.org/schemas/Policy/1.0.0",
    },
    CredentialType.ROOT_POLICY: {
        "holder": ROOT,
        "issuedBy": ROOT,
        "networkId": "synet-main",
        "policyId": "policy-root",
        "version": "1.0.0",
    },
    CredentialType.NETWORK_DECLARATION: {
        "holder": ROOT,
        "issuedBy": ROOT,
        "networkId": "synet-main",
        "policyId": "policy-root",
        "topology": "mesh",
        "ipv4": "10.0.0.0",
    },
    CredentialType.ROUTING: {
        "holder": GATEWAY,
        "issuedBy": ROOT,
        "ip": "10.1.0.1",
        "publicKey": "ed25519:abcd",
        "endpoint": "wss://gw-eu-1.synet.example:443",
        "networkId": "synet-main",
    },
}


def build_credential(tag: CredentialType, subject=None, **overrides) -> dict:
    credential = {
        "@context": list(DEFAULT_CONTEXT),
        "id": f"urn:synet:{tag.value.lower()}:0001",
        "type": [BASE_CREDENTIAL_TYPE, tag.value],
        "issuer": {"id": ROOT["id"]},
        "issuanceDate": "2026-01-01T00:00:00Z",
        "expirationDate": "2027-01-01T00:00:00Z",
        "credentialSubject": copy.deepcopy(SUBJECTS[tag] if subject is None else subject),
        "proof": {
            "type": "Ed25519Signature2020",
            "proofValue": "z3FXQjecWufY46",
            "verificationMethod": f"{ROOT['id']}#key-1",
            "proofPurpose": "assertionMethod",
        },
        "meta": {"version": "1.0.0", "schema": f"https://synthetism.org/schemas/{tag.value}/1.0.0"},
    }
    credential.update(overrides)
    return credential


@pytest.fixture
def subjects():
    """Fresh copy of one valid subject per credential type."""
    return copy.deepcopy(SUBJECTS)


@pytest.fixture
def make_credential():
    """Factory: make_credential(tag, subject=None, **envelope_overrides) -> dict."""
    return build_credential


@pytest.fixture
def resource():
    return copy.deepcopy(RESOURCE)


@pytest.fixture
def sha256_hello():
    return SHA256_HELLO


@pytest.fixture
def cid_v0():
    return CID_V0
