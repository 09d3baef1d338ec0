"""
Envelope Validator

Turns an untrusted decoded value (usually `json.loads` output) into a typed
SynetVerifiableCredential whose subject variant is resolved, or reports the
first rule it breaks. Validation is fail-fast so every failure names one
rule and one field path.

Order of checks:
1. envelope fields present (@context, id, type, issuer.id, issuanceDate,
   credentialSubject, proof)
2. `type` carries exactly one recognized CredentialType tag
3. credentialSubject normalizes and matches that tag's shape
4. expirationDate, when present, strictly after issuanceDate
5. proof.type present and non-empty

Pure and synchronous: no I/O, no shared state, safe to call from any
number of threads at once.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from synet_credential.config import DEFAULT_CONFIG, ValidatorConfig
from synet_credential.credential import CredentialMeta, SynetVerifiableCredential
from synet_credential.errors import (
    AmbiguousSubjectType,
    CredentialValidationError,
    MissingRequiredField,
    TemporalInvariantViolation,
    TypeMismatch,
    UnknownCredentialType,
    ValidationFailure,
)
from synet_credential.models import CredentialType, ProofType, parse_timestamp
from synet_credential.normalize import check_wire_keys, normalize_subject
from synet_credential.registry import SUBJECT_PATH, coerce_tag, model_for, recognized_tags
from synet_credential.subjects import BaseCredentialSubject

logger = logging.getLogger(__name__)

ENVELOPE_REQUIRED = (
    "@context",
    "id",
    "type",
    "issuer",
    "issuanceDate",
    "credentialSubject",
    "proof",
)


def _loc_to_path(prefix: str, loc: tuple) -> str:
    path = prefix
    for part in loc:
        if isinstance(part, int):
            path = f"{path}[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path


def _from_pydantic(error: ValidationError, prefix: str, config: ValidatorConfig) -> CredentialValidationError:
    """Map the first pydantic error onto the failure taxonomy."""
    first = error.errors()[0]
    path = _loc_to_path(prefix, first["loc"])
    if first["type"] == "missing":
        return MissingRequiredField(path, "field required", limit=config.max_value_repr)
    return TypeMismatch(path, first["msg"], first.get("input"), limit=config.max_value_repr)


def _timestamp(value: Any, path: str, config: ValidatorConfig) -> datetime:
    try:
        return parse_timestamp(value)
    except (TypeError, ValueError):
        raise TypeMismatch(path, "expected an ISO 8601 timestamp", value, limit=config.max_value_repr) from None


def _check_envelope_fields(raw: Mapping[str, Any], config: ValidatorConfig) -> None:
    for name in ENVELOPE_REQUIRED:
        if raw.get(name) is None:
            raise MissingRequiredField(name, f"{name} is required", limit=config.max_value_repr)
    check_wire_keys(SynetVerifiableCredential, raw, "", config)

    issuer = raw["issuer"]
    if not isinstance(issuer, Mapping):
        raise TypeMismatch("issuer", "issuer must be an object", issuer, limit=config.max_value_repr)
    if issuer.get("id") is None:
        raise MissingRequiredField("issuer.id", "issuer.id is required", limit=config.max_value_repr)


def resolve_declared_type(type_entries: Any, config: Optional[ValidatorConfig] = None) -> CredentialType:
    """The one CredentialType tag declared in an envelope `type` list."""
    config = config or DEFAULT_CONFIG
    if not isinstance(type_entries, list):
        raise TypeMismatch("type", "type must be a list of strings", type_entries, limit=config.max_value_repr)
    for i, entry in enumerate(type_entries):
        if not isinstance(entry, str):
            raise TypeMismatch(f"type[{i}]", "type entries must be strings", entry, limit=config.max_value_repr)

    tags = recognized_tags(type_entries)
    if not tags:
        raise UnknownCredentialType(
            "type", "no recognized credential type in type", type_entries, limit=config.max_value_repr
        )
    if len(tags) > 1:
        raise AmbiguousSubjectType(
            "type",
            "type declares more than one credential type",
            type_entries,
            candidates=[tag.value for tag in tags],
            limit=config.max_value_repr,
        )
    return tags[0]


def _check_delegation(subject: BaseCredentialSubject, config: ValidatorConfig) -> None:
    delegation = getattr(subject, "delegated", None)
    if delegation is None:
        return
    try:
        valid_from = parse_timestamp(delegation.valid_from)
        valid_until = parse_timestamp(delegation.valid_until)
    except (TypeError, ValueError):
        # Only enforced when both ends resolve as timestamps
        return
    if valid_from > valid_until:
        raise TemporalInvariantViolation(
            f"{SUBJECT_PATH}.delegated.validUntil",
            "delegation validUntil precedes validFrom",
            delegation.valid_until,
            limit=config.max_value_repr,
        )


def validate_subject(
    tag: Union[CredentialType, str],
    value: Any,
    config: Optional[ValidatorConfig] = None,
) -> BaseCredentialSubject:
    """Normalize and validate a bare subject against the shape of `tag`."""
    config = config or DEFAULT_CONFIG
    tag = coerce_tag(tag)
    subject = normalize_subject(tag, value, config)
    try:
        validated = model_for(tag).model_validate(subject)
    except ValidationError as e:
        raise _from_pydantic(e, SUBJECT_PATH, config) from e
    _check_delegation(validated, config)
    return validated


def validate_credential(
    raw: Any,
    config: Optional[ValidatorConfig] = None,
) -> SynetVerifiableCredential:
    """
    Validate a decoded credential and return it typed and normalized.

    Raises a CredentialValidationError subclass describing the first
    violated rule. Validating the `to_dict()` of a returned credential
    yields an equal credential.
    """
    config = config or DEFAULT_CONFIG
    if not isinstance(raw, Mapping):
        raise TypeMismatch("", "credential must be an object", raw, limit=config.max_value_repr)

    _check_envelope_fields(raw, config)
    tag = resolve_declared_type(raw["type"], config)
    subject = validate_subject(tag, raw["credentialSubject"], config)

    issued = _timestamp(raw["issuanceDate"], "issuanceDate", config)
    if raw.get("expirationDate") is not None:
        expires = _timestamp(raw["expirationDate"], "expirationDate", config)
        if expires <= issued:
            raise TemporalInvariantViolation(
                "expirationDate",
                "expirationDate must be after issuanceDate",
                raw["expirationDate"],
                limit=config.max_value_repr,
            )

    proof = raw["proof"]
    if not isinstance(proof, Mapping):
        raise TypeMismatch("proof", "proof must be an object", proof, limit=config.max_value_repr)
    check_wire_keys(ProofType, proof, "proof", config)
    proof_type = proof.get("type")
    if proof_type is None:
        raise MissingRequiredField("proof.type", "proof.type is required", limit=config.max_value_repr)
    if not isinstance(proof_type, str):
        raise TypeMismatch("proof.type", "proof.type must be a string", proof_type, limit=config.max_value_repr)
    if not proof_type.strip():
        raise MissingRequiredField("proof.type", "proof.type must not be empty", proof_type, limit=config.max_value_repr)

    meta = raw.get("meta")
    if isinstance(meta, Mapping):
        check_wire_keys(CredentialMeta, meta, "meta", config)

    envelope = dict(raw)
    envelope["credentialSubject"] = subject
    try:
        credential = SynetVerifiableCredential[type(subject)].model_validate(envelope)
    except ValidationError as e:
        raise _from_pydantic(e, "", config) from e

    logger.debug(f"Validated {tag.value} credential {credential.id}")
    return credential


def check_credential(
    raw: Any,
    config: Optional[ValidatorConfig] = None,
) -> Union[SynetVerifiableCredential, ValidationFailure]:
    """Like validate_credential, but returns the failure instead of raising."""
    try:
        return validate_credential(raw, config)
    except CredentialValidationError as e:
        logger.debug(f"Credential rejected: {e}")
        return e.failure
