from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

WEB2_SCHEMES = ("http://", "https://")


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO 8601 timestamp. "Z" is accepted for UTC and naive values
    are read as UTC, so comparisons never mix aware and naive datetimes.

    Raises ValueError / TypeError for anything else.
    """
    if not isinstance(value, str):
        raise TypeError(f"timestamp must be a string, got {type(value).__name__}")
    dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


# Wire format is camelCase; attributes stay snake_case.
SYNET_MODEL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
)

OPEN_MODEL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
    extra="allow",
)


class SynetModel(BaseModel):
    """Base for every Synet value object: immutable, camelCase on the wire."""

    model_config = SYNET_MODEL_CONFIG

    def to_dict(self) -> Dict[str, Any]:
        """Export using wire field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class OpenSynetModel(SynetModel):
    """Known fields checked strictly, unknown fields kept as an open map."""

    model_config = OPEN_MODEL_CONFIG

    @model_validator(mode="before")
    @classmethod
    def drop_null_extensions(cls, data: Any) -> Any:
        # null == absent for unknown keys too
        if not isinstance(data, dict):
            return data
        known = set(cls.model_fields)
        known.update(info.alias for info in cls.model_fields.values() if info.alias)
        return {k: v for k, v in data.items() if v is not None or k in known}

    @property
    def extensions(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


class CredentialType(str, Enum):
    # Identity
    IDENTITY = "IdentityCredential"
    ROOT_IDENTITY = "RootIdentityCredential"
    GATEWAY_IDENTITY = "GatewayIdentityCredential"
    MARKET_IDENTITY = "MarketIdentityCredential"

    # Authorization
    AUTHORIZATION = "AuthorizationCredential"
    INTELLIGENCE_AUTHORIZATION = "IntelligenceAuthorizationCredential"
    GATEWAY_AUTHORIZATION = "GatewayAuthorizationCredential"

    # Assets
    FUNGIBLE_ASSET = "FungibleAssetCredential"
    NON_FUNGIBLE_ASSET = "NonFungibleAssetCredential"
    DATA_ASSET = "DataAssetCredential"
    IP_POOL = "IpPoolAssetCredential"
    IP = "IpAssetCredential"

    # Governance
    POLICY = "PolicyCredential"
    ROOT_POLICY = "RootPolicyCredential"

    # Declaration
    NETWORK_DECLARATION = "NetworkDeclarationCredential"

    # Routing
    ROUTING = "RoutingCredential"


class CredentialFamily(str, Enum):
    """
    What a credential asserts:
    - IDENTITY: "I AM"
    - AUTHORIZATION: "I CAN"
    - GOVERNANCE: "I MUST"
    - ASSET: "I HAVE / USE / OWN"
    - DECLARATION: "I DECLARE TO BE TRUE"
    - ROUTING: "I AM REACHABLE AT"
    """
    IDENTITY = "Identity"
    AUTHORIZATION = "Authorization"
    GOVERNANCE = "Governance"
    ASSET = "Asset"
    DECLARATION = "Declaration"
    ROUTING = "Routing"


class Intelligence(str, Enum):
    HUMAN = "Human"
    AI = "AI"
    HYBRID = "Hybrid"
    SWARM = "Swarm"
    SUPERINTELLIGENT = "Superintelligent"


class SynetHolder(OpenSynetModel):
    """A party referenced by a credential: opaque id, optional display name."""

    id: str
    name: Optional[str] = None


class VerifiableResource(SynetModel):
    """
    Externally stored content proven by hash.

    Verifiers must validate any mirror's content against `hash`; that
    fetch-and-compare step lives outside this package. Web2 mirrors
    (http/https) are discouraged but allowed.
    """

    ipfs_uri: str
    hash: str  # SHA-256 or multihash
    mirrors: List[str] = Field(default_factory=list)

    def web2_mirrors(self) -> List[str]:
        return [m for m in self.mirrors if m.lower().startswith(WEB2_SCHEMES)]


class CredentialDelegation(OpenSynetModel):
    """Time-bounded transfer of rights between two holders."""

    id: str
    delegated_by: SynetHolder  # Who delegated the asset
    delegated_to: SynetHolder  # Who the asset is delegated to
    valid_from: str
    valid_until: str


class ProofType(OpenSynetModel):
    """Proof envelope. Only `type` is checked; signatures are verified elsewhere."""

    type: str
    proof_value: Optional[str] = None
    created: Optional[str] = None
    verification_method: Optional[str] = None
    proof_purpose: Optional[str] = None
