"""
Holder / Resource Normalizer

Canonicalizes the optional substructures of a subject before it is
validated against its model:
- SynetHolder.id trimmed and required to be a non-empty string
- VerifiableResource.ipfsUri trimmed, scheme lowercased and checked
- VerifiableResource.hash recognized as SHA-256 or multihash
- absent mirrors become an empty list
- known subject fields set to null are dropped (null == absent)
- attribute-style keys (`issued_by`) are refused; only wire names are read

Checks are format-only. Mirror content is never fetched or re-hashed here;
that belongs to whatever service resolves the resource.

Every function returns a new dict and leaves its input untouched.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Type, Union

from pydantic import BaseModel

from synet_credential.config import DEFAULT_CONFIG, ValidatorConfig
from synet_credential.errors import MalformedResource, MissingRequiredField, TypeMismatch
from synet_credential.hashing import parse_digest
from synet_credential.models import WEB2_SCHEMES, CredentialDelegation, CredentialType, VerifiableResource
from synet_credential.registry import SUBJECT_PATH, FieldKind, shape_for

logger = logging.getLogger(__name__)


def _join(path: str, name: Union[str, int]) -> str:
    if isinstance(name, int):
        return f"{path}[{name}]"
    return f"{path}.{name}" if path else name


def _require_mapping(value: Any, path: str, config: ValidatorConfig) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise TypeMismatch(path, "expected an object", value, limit=config.max_value_repr)
    return value


def check_wire_keys(
    model: Type[BaseModel],
    value: Mapping[str, Any],
    path: str,
    config: Optional[ValidatorConfig] = None,
) -> None:
    """
    Reject attribute-style keys (`issued_by`) where the wire name differs
    (`issuedBy`). The models also accept attribute names so they can be
    built in code; untrusted input only ever gets the wire names.
    """
    config = config or DEFAULT_CONFIG
    for name, info in model.model_fields.items():
        if info.alias and info.alias != name and name in value:
            raise TypeMismatch(
                _join(path, name),
                f"unknown key {name!r}, expected {info.alias!r}",
                value[name],
                limit=config.max_value_repr,
            )


def normalize_holder(
    value: Any,
    path: str = "holder",
    config: Optional[ValidatorConfig] = None,
) -> Dict[str, Any]:
    config = config or DEFAULT_CONFIG
    holder = dict(_require_mapping(value, path, config))
    id_path = _join(path, "id")

    if holder.get("id") is None:
        raise MissingRequiredField(id_path, "holder id is required", limit=config.max_value_repr)
    holder_id = holder["id"]
    if not isinstance(holder_id, str):
        raise TypeMismatch(id_path, "holder id must be a string", holder_id, limit=config.max_value_repr)
    if not holder_id.strip():
        raise MalformedResource(id_path, "holder id must not be empty", holder_id, limit=config.max_value_repr)

    holder["id"] = holder_id.strip()
    return holder


def normalize_holder_list(
    value: Any,
    path: str,
    config: Optional[ValidatorConfig] = None,
) -> List[Dict[str, Any]]:
    config = config or DEFAULT_CONFIG
    if not isinstance(value, list):
        raise TypeMismatch(path, "expected a list of holders", value, limit=config.max_value_repr)
    return [normalize_holder(item, _join(path, i), config) for i, item in enumerate(value)]


def _normalize_ipfs_uri(value: Any, path: str, config: ValidatorConfig) -> str:
    if not isinstance(value, str):
        raise TypeMismatch(path, "ipfsUri must be a string", value, limit=config.max_value_repr)
    uri = value.strip()
    scheme, sep, rest = uri.partition("://")
    scheme = scheme.lower()
    if not sep or scheme not in config.ipfs_schemes or not rest.strip("/"):
        raise MalformedResource(
            path,
            f"ipfsUri must look like {config.ipfs_schemes[0]}://<cid>",
            value,
            limit=config.max_value_repr,
        )
    return f"{scheme}://{rest}"


def _normalize_mirrors(value: Any, path: str, config: ValidatorConfig) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeMismatch(path, "mirrors must be a list of URIs", value, limit=config.max_value_repr)

    mirrors = []
    for i, mirror in enumerate(value):
        item_path = _join(path, i)
        if not isinstance(mirror, str):
            raise TypeMismatch(item_path, "mirror must be a string", mirror, limit=config.max_value_repr)
        mirror = mirror.strip()
        if not mirror:
            raise MalformedResource(item_path, "mirror must not be empty", mirror, limit=config.max_value_repr)
        if mirror.lower().startswith(WEB2_SCHEMES):
            if config.web2_mirrors == "reject":
                raise MalformedResource(item_path, "web2 mirrors are not accepted", mirror, limit=config.max_value_repr)
            if config.web2_mirrors == "warn":
                logger.warning(f"Web2 mirror at {item_path}: {mirror} (verify content against hash)")
        mirrors.append(mirror)
    return mirrors


def normalize_resource(
    value: Any,
    path: str = "verifiableResource",
    config: Optional[ValidatorConfig] = None,
) -> Dict[str, Any]:
    """
    Canonicalize a VerifiableResource.

    Raises MalformedResource when `hash` is not a SHA-256 or multihash
    digest, or `ipfsUri` does not use an accepted scheme.
    """
    config = config or DEFAULT_CONFIG
    resource = dict(_require_mapping(value, path, config))
    check_wire_keys(VerifiableResource, resource, path, config)

    for name in ("ipfsUri", "hash"):
        if resource.get(name) is None:
            raise MissingRequiredField(_join(path, name), f"{name} is required", limit=config.max_value_repr)

    resource["ipfsUri"] = _normalize_ipfs_uri(resource["ipfsUri"], _join(path, "ipfsUri"), config)

    digest = resource["hash"]
    hash_path = _join(path, "hash")
    if not isinstance(digest, str):
        raise TypeMismatch(hash_path, "hash must be a string", digest, limit=config.max_value_repr)
    try:
        parse_digest(digest)
    except ValueError as e:
        raise MalformedResource(hash_path, f"unrecognized digest: {e}", digest, limit=config.max_value_repr) from e
    resource["hash"] = digest.strip()

    resource["mirrors"] = _normalize_mirrors(resource.get("mirrors"), _join(path, "mirrors"), config)
    return resource


def normalize_delegation(
    value: Any,
    path: str = "delegated",
    config: Optional[ValidatorConfig] = None,
) -> Dict[str, Any]:
    config = config or DEFAULT_CONFIG
    delegation = dict(_require_mapping(value, path, config))
    check_wire_keys(CredentialDelegation, delegation, path, config)
    for name in ("delegatedBy", "delegatedTo"):
        if delegation.get(name) is not None:
            delegation[name] = normalize_holder(delegation[name], _join(path, name), config)
    return delegation


def normalize_subject(
    tag: Union[CredentialType, str],
    value: Any,
    config: Optional[ValidatorConfig] = None,
    path: str = SUBJECT_PATH,
) -> Dict[str, Any]:
    """Normalize every holder, resource and delegation field the tag's shape declares."""
    config = config or DEFAULT_CONFIG
    spec = shape_for(tag)
    subject = dict(_require_mapping(value, path, config))
    check_wire_keys(spec.model, subject, path, config)

    for field in spec.fields:
        raw = subject.get(field.name)
        if raw is None:
            # null and absent are the same thing for known fields
            subject.pop(field.name, None)
            continue
        field_path = _join(path, field.name)
        if field.kind is FieldKind.HOLDER:
            subject[field.name] = normalize_holder(raw, field_path, config)
        elif field.kind is FieldKind.HOLDER_LIST:
            subject[field.name] = normalize_holder_list(raw, field_path, config)
        elif field.kind is FieldKind.VERIFIABLE_RESOURCE:
            subject[field.name] = normalize_resource(raw, field_path, config)
        elif field.kind is FieldKind.DELEGATION:
            subject[field.name] = normalize_delegation(raw, field_path, config)

    logger.debug(f"Normalized {spec.tag.value} subject ({len(subject)} keys)")
    return subject
