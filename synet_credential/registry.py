"""
Subject Type Registry

Single source of truth for which subject shape belongs to which
CredentialType tag. Shapes are derived from the pydantic models in
`synet_credential.subjects`, so a field added to a model shows up here
without a second declaration.

Classification (used when `type` is missing or untrusted):
1. candidates = variants whose required wire fields are all present
2. keep the most specific ones (most required fields)
3. among those, keep the ones with the most present optional fields
4. variants with identical required fields (Identity and Policy) fall back
   to CredentialType declaration order, so a bare {holder, issuedBy}
   subject is an Identity
5. more than one left = ambiguous; callers decide what to do
"""

from __future__ import annotations

import typing
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Mapping, Tuple, Type, Union

from synet_credential.errors import AmbiguousSubjectType, UnknownCredentialType
from synet_credential.models import (
    CredentialDelegation,
    CredentialFamily,
    CredentialType,
    SynetHolder,
    VerifiableResource,
)
from synet_credential.subjects import (
    AuthorizationSubject,
    BaseCredentialSubject,
    DataAssetSubject,
    FungibleAssetSubject,
    GatewayAuthorizationSubject,
    GatewayIdentitySubject,
    IdentitySubject,
    IntelligenceAuthorizationSubject,
    IpAssetSubject,
    IpPoolAssetSubject,
    MarketIdentitySubject,
    NetworkDeclarationSubject,
    NonFungibleAssetSubject,
    PolicySubject,
    RootIdentitySubject,
    RootPolicySubject,
    RoutingSubject,
)

SUBJECT_PATH = "credentialSubject"


class FieldKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    HOLDER = "holder"
    HOLDER_LIST = "holder_list"
    STRING_LIST = "string_list"
    VERIFIABLE_RESOURCE = "verifiable_resource"
    DELEGATION = "delegation"
    ENUM = "enum"
    OPEN_MAP = "open_map"


@dataclass(frozen=True)
class FieldShape:
    name: str  # wire name
    kind: FieldKind
    required: bool


@dataclass(frozen=True)
class FieldSpec:
    """Structural shape of one subject variant."""
    tag: CredentialType
    family: CredentialFamily
    model: Type[BaseCredentialSubject]
    fields: Tuple[FieldShape, ...]

    @property
    def required(self) -> frozenset:
        return frozenset(f.name for f in self.fields if f.required)

    @property
    def optional(self) -> frozenset:
        return frozenset(f.name for f in self.fields if not f.required)

    def field(self, name: str) -> FieldShape:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tag": self.tag.value,
            "family": self.family.value,
            "required": {f.name: f.kind.value for f in self.fields if f.required},
            "optional": {f.name: f.kind.value for f in self.fields if not f.required},
        }


SUBJECT_MODELS: Dict[CredentialType, Tuple[CredentialFamily, Type[BaseCredentialSubject]]] = {
    CredentialType.IDENTITY: (CredentialFamily.IDENTITY, IdentitySubject),
    CredentialType.ROOT_IDENTITY: (CredentialFamily.IDENTITY, RootIdentitySubject),
    CredentialType.GATEWAY_IDENTITY: (CredentialFamily.IDENTITY, GatewayIdentitySubject),
    CredentialType.MARKET_IDENTITY: (CredentialFamily.IDENTITY, MarketIdentitySubject),
    CredentialType.AUTHORIZATION: (CredentialFamily.AUTHORIZATION, AuthorizationSubject),
    CredentialType.INTELLIGENCE_AUTHORIZATION: (CredentialFamily.AUTHORIZATION, IntelligenceAuthorizationSubject),
    CredentialType.GATEWAY_AUTHORIZATION: (CredentialFamily.AUTHORIZATION, GatewayAuthorizationSubject),
    CredentialType.FUNGIBLE_ASSET: (CredentialFamily.ASSET, FungibleAssetSubject),
    CredentialType.NON_FUNGIBLE_ASSET: (CredentialFamily.ASSET, NonFungibleAssetSubject),
    CredentialType.DATA_ASSET: (CredentialFamily.ASSET, DataAssetSubject),
    CredentialType.IP_POOL: (CredentialFamily.ASSET, IpPoolAssetSubject),
    CredentialType.IP: (CredentialFamily.ASSET, IpAssetSubject),
    CredentialType.POLICY: (CredentialFamily.GOVERNANCE, PolicySubject),
    CredentialType.ROOT_POLICY: (CredentialFamily.GOVERNANCE, RootPolicySubject),
    CredentialType.NETWORK_DECLARATION: (CredentialFamily.DECLARATION, NetworkDeclarationSubject),
    CredentialType.ROUTING: (CredentialFamily.ROUTING, RoutingSubject),
}

_TAG_BY_MODEL = {model: tag for tag, (_, model) in SUBJECT_MODELS.items()}


def _unwrap_optional(annotation: Any) -> Any:
    if typing.get_origin(annotation) is Union:
        args = tuple(a for a in typing.get_args(annotation) if a is not type(None))
        if len(args) == 1:
            return args[0]
        return Union[args]
    return annotation


def _kind_of(annotation: Any) -> FieldKind:
    annotation = _unwrap_optional(annotation)
    origin = typing.get_origin(annotation)

    if origin is Union and set(typing.get_args(annotation)) == {int, float}:
        return FieldKind.NUMBER
    if origin in (list, List):
        (item,) = typing.get_args(annotation)
        if item is SynetHolder:
            return FieldKind.HOLDER_LIST
        if item is str:
            return FieldKind.STRING_LIST
    if origin in (dict, Dict):
        return FieldKind.OPEN_MAP
    if annotation is str:
        return FieldKind.STRING
    if annotation is SynetHolder:
        return FieldKind.HOLDER
    if annotation is VerifiableResource:
        return FieldKind.VERIFIABLE_RESOURCE
    if annotation is CredentialDelegation:
        return FieldKind.DELEGATION
    if isinstance(annotation, type) and issubclass(annotation, Enum):
        return FieldKind.ENUM
    raise TypeError(f"No field kind for annotation {annotation!r}")


def coerce_tag(tag: Union[CredentialType, str], path: str = "type") -> CredentialType:
    """Turn a tag string into a CredentialType or raise UnknownCredentialType."""
    if isinstance(tag, CredentialType):
        return tag
    try:
        return CredentialType(tag)
    except ValueError:
        raise UnknownCredentialType(path, f"unknown credential type {tag!r}", tag) from None


@lru_cache(maxsize=None)
def _shape(tag: CredentialType) -> FieldSpec:
    family, model = SUBJECT_MODELS[tag]
    fields = tuple(
        FieldShape(
            name=info.alias or name,
            kind=_kind_of(info.annotation),
            required=info.is_required(),
        )
        for name, info in model.model_fields.items()
    )
    return FieldSpec(tag=tag, family=family, model=model, fields=fields)


def shape_for(tag: Union[CredentialType, str]) -> FieldSpec:
    """Required/optional wire fields and their kinds for a credential type."""
    return _shape(coerce_tag(tag))


def model_for(tag: Union[CredentialType, str]) -> Type[BaseCredentialSubject]:
    return SUBJECT_MODELS[coerce_tag(tag)][1]


def family_of(tag: Union[CredentialType, str]) -> CredentialFamily:
    return SUBJECT_MODELS[coerce_tag(tag)][0]


def tag_for_model(model: Type[BaseCredentialSubject]) -> CredentialType:
    try:
        return _TAG_BY_MODEL[model]
    except KeyError:
        raise UnknownCredentialType(SUBJECT_PATH, f"{model.__name__} is not a registered subject variant") from None


def all_shapes() -> List[FieldSpec]:
    return [_shape(tag) for tag in CredentialType]


def recognized_tags(type_entries: Iterable[Any]) -> List[CredentialType]:
    """CredentialType tags found in an envelope `type` list, in order, without repeats."""
    found: List[CredentialType] = []
    for entry in type_entries:
        if not isinstance(entry, str):
            continue
        try:
            tag = CredentialType(entry)
        except ValueError:
            continue
        if tag not in found:
            found.append(tag)
    return found


def classify(subject: Any) -> List[CredentialType]:
    """
    Candidate tags for a raw subject value, best first.

    One entry means the subject is unambiguous, several mean a true tie
    between equally specific variants, none means nothing matches.
    """
    if not isinstance(subject, Mapping):
        return []
    present = {k for k, v in subject.items() if v is not None}

    matches = [spec for spec in all_shapes() if spec.required <= present]
    if not matches:
        return []

    most_required = max(len(spec.required) for spec in matches)
    matches = [spec for spec in matches if len(spec.required) == most_required]

    best_overlap = max(len(spec.optional & present) for spec in matches)
    matches = [spec for spec in matches if len(spec.optional & present) == best_overlap]

    if len({spec.required for spec in matches}) == 1:
        # same shape: the tag declared first in CredentialType wins
        matches = matches[:1]
    return [spec.tag for spec in matches]


def resolve_subject_type(subject: Any, path: str = SUBJECT_PATH) -> CredentialType:
    """Classify a subject and insist on exactly one answer."""
    candidates = classify(subject)
    if not candidates:
        raise UnknownCredentialType(path, "subject matches no known credential type", subject)
    if len(candidates) > 1:
        raise AmbiguousSubjectType(
            path,
            "subject matches several equally specific credential types",
            subject,
            candidates=[tag.value for tag in candidates],
        )
    return candidates[0]
