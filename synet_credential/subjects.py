"""
Credential Subject Variants

The claim payload carried in `credentialSubject`. Every concrete variant is
its own record type; category bases (identity, authorization, asset,
governance) only share field declarations and are never registered or
issued themselves. A RootIdentitySubject is therefore not an
IdentitySubject: variants relate only through the registry.

Unknown keys are preserved in `extensions` and written back on export.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import PlainValidator

from synet_credential.models import (
    CredentialDelegation,
    Intelligence,
    OpenSynetModel,
    SynetHolder,
    VerifiableResource,
)


def _number(value: Any) -> Union[int, float]:
    # bool is an int subclass; numeric strings are not numbers on the wire
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number, got {type(value).__name__}")
    return value


Number = Annotated[Union[int, float], PlainValidator(_number)]


class BaseCredentialSubject(OpenSynetModel):
    """Root of every subject: who the credential is about."""

    holder: SynetHolder


# Identity ("I AM")

class _IdentityFields(BaseCredentialSubject):
    issued_by: SynetHolder
    scope: Optional[List[str]] = None  # claim purpose or restriction


class IdentitySubject(_IdentityFields):
    pass


class RootIdentitySubject(_IdentityFields):
    network_id: str
    pool_cidr: str  # IP range operated by the root
    url: Optional[str] = None


class GatewayIdentitySubject(_IdentityFields):
    network_id: str
    region_id: Optional[str] = None
    cidr: Optional[str] = None
    ip: Optional[str] = None
    ip_pool_id: Optional[str] = None
    public_key_hex: Optional[str] = None  # for rotation


class MarketIdentitySubject(_IdentityFields):
    market_id: str
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    url: Optional[str] = None
    tags: Optional[List[str]] = None


# Authorization ("I CAN")

class _AuthorizationFields(BaseCredentialSubject):
    authorized_by: SynetHolder
    scope: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    schema_uri: Optional[str] = None
    verifiable_resource: Optional[VerifiableResource] = None


class AuthorizationSubject(_AuthorizationFields):
    pass


class IntelligenceAuthorizationSubject(_AuthorizationFields):
    intelligence: Intelligence
    witnesses: Optional[List[SynetHolder]] = None
    certifications: Optional[List[str]] = None


class GatewayAuthorizationSubject(_AuthorizationFields):
    network_id: str
    region_id: str
    ip: str
    cidr: str
    ip_pool_id: str
    valid_until: Optional[str] = None


# Assets ("I HAVE / USE / OWN")

class _AssetFields(BaseCredentialSubject):
    issued_by: SynetHolder
    delegated: Optional[CredentialDelegation] = None
    parent_asset_id: Optional[str] = None
    schema_uri: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    verifiable_resource: Optional[VerifiableResource] = None


class FungibleAssetSubject(_AssetFields):
    quantity: Number
    total_supply: Number


class NonFungibleAssetSubject(_AssetFields):
    unique_identifier: str


class DataAssetSubject(_AssetFields):
    licensed_by: SynetHolder  # who owns or grants the license
    scope: List[str]  # e.g. "analytics", "storage", "training"


class IpPoolAssetSubject(_AssetFields):
    network_id: str
    cidr: str
    region_id: str  # region the pool is bound to


class IpAssetSubject(_AssetFields):
    network_id: str
    ip: str


# Governance ("I MUST") and declarations ("I DECLARE TO BE TRUE")

class _GovernanceFields(BaseCredentialSubject):
    issued_by: SynetHolder
    metadata: Optional[Dict[str, Any]] = None
    schema_uri: Optional[str] = None
    verifiable_resource: Optional[VerifiableResource] = None


class PolicySubject(_GovernanceFields):
    pass


class RootPolicySubject(_GovernanceFields):
    network_id: str
    policy_id: str
    version: str


class NetworkDeclarationSubject(_GovernanceFields):
    network_id: str
    policy_id: str
    ipv4: Optional[str] = None
    ipv6: Optional[str] = None
    cidr: Optional[str] = None
    network_type: Optional[str] = None
    topology: Optional[str] = None
    root_url: Optional[str] = None


# Routing

class RoutingSubject(BaseCredentialSubject):
    issued_by: SynetHolder
    ip: str
    public_key: str
    endpoint: str
    network_id: str
    metadata: Optional[Dict[str, Any]] = None
