"""
Synet Verifiable Credential Envelope

The outer wrapper carried between issuers, verifiers and network nodes.
Field names on the wire are compatibility-critical and must match exactly:

{
    "@context": ["https://www.w3.org/2018/credentials/v1"],
    "id": "urn:uuid:...",
    "type": ["VerifiableCredential", "IpAssetCredential"],
    "issuer": {"id": "did:key:z6Mk..."},
    "issuanceDate": "2026-01-18T12:00:00Z",
    "expirationDate": "2027-01-18T12:00:00Z",
    "credentialSubject": {...},
    "proof": {"type": "Ed25519Signature2020", ...},
    "meta": {"version": "1.0.0", "schema": "https://synthetism.org/schemas/IpAsset/1.0.0"}
}

The envelope is generic over its subject variant:
`SynetVerifiableCredential[IpAssetSubject]`. Build instances through
`synet_credential.validator.validate_credential`, which resolves the
variant from `type` and enforces the cross-field invariants.
"""

from __future__ import annotations

from datetime import datetime
from typing import Generic, List, Optional, Type, TypeVar

from pydantic import Field

from synet_credential.hashing import canonical, h_credential
from synet_credential.models import (
    CredentialType,
    OpenSynetModel,
    ProofType,
    SynetModel,
    parse_timestamp,
)
from synet_credential.registry import recognized_tags
from synet_credential.subjects import BaseCredentialSubject

DEFAULT_CONTEXT = ["https://www.w3.org/2018/credentials/v1"]
BASE_CREDENTIAL_TYPE = "VerifiableCredential"

S = TypeVar("S", bound=BaseCredentialSubject)


class CredentialIssuer(OpenSynetModel):
    id: str


class CredentialMeta(SynetModel):
    version: Optional[str] = None  # e.g. "1.0.0"
    schema_ref: Optional[str] = Field(default=None, alias="schema")  # e.g. "https://synthetism.org/schemas/IpAsset/1.0.0"


class SynetVerifiableCredential(SynetModel, Generic[S]):
    context: List[str] = Field(alias="@context")
    id: str
    type: List[str]
    issuer: CredentialIssuer
    issuance_date: str
    expiration_date: Optional[str] = None
    credential_subject: S
    proof: ProofType
    meta: Optional[CredentialMeta] = None

    @property
    def credential_type(self) -> CredentialType:
        """The single CredentialType tag in `type`."""
        return recognized_tags(self.type)[0]

    @property
    def subject_model(self) -> Type[BaseCredentialSubject]:
        return type(self.credential_subject)

    @property
    def issued_at(self) -> datetime:
        return parse_timestamp(self.issuance_date)

    @property
    def expires_at(self) -> Optional[datetime]:
        if self.expiration_date is None:
            return None
        return parse_timestamp(self.expiration_date)

    def is_expired(self, at: datetime) -> bool:
        expires = self.expires_at
        return expires is not None and at >= expires

    def to_json(self) -> bytes:
        """Canonical JSON bytes (sorted keys, compact)."""
        return canonical(self.to_dict())

    def digest(self) -> str:
        """Domain-separated SHA-256 of the credential without its proof."""
        return h_credential(self.to_dict())
