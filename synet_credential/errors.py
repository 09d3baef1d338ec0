"""
Validation failure taxonomy.

Every failure the core can report is recoverable: the validator never
exits or retries, it raises (or returns) a structured failure naming the
violated rule and the dotted field path where it happened. Rendering the
failure for humans is the caller's job.

Rules:
- UNKNOWN_CREDENTIAL_TYPE: tag not in the closed CredentialType set
- MISSING_REQUIRED_FIELD: envelope or subject field absent
- TYPE_MISMATCH: field present but of the wrong kind
- AMBIGUOUS_SUBJECT_TYPE: several equally specific variants match
- MALFORMED_RESOURCE: holder/resource normalization failure
- TEMPORAL_INVARIANT_VIOLATION: dates out of order
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

DEFAULT_MAX_VALUE_REPR = 120


class ErrorCode(str, Enum):
    UNKNOWN_CREDENTIAL_TYPE = "UnknownCredentialType"
    MISSING_REQUIRED_FIELD = "MissingRequiredField"
    TYPE_MISMATCH = "TypeMismatch"
    AMBIGUOUS_SUBJECT_TYPE = "AmbiguousSubjectType"
    MALFORMED_RESOURCE = "MalformedResource"
    TEMPORAL_INVARIANT_VIOLATION = "TemporalInvariantViolation"


def describe_value(value: Any, limit: int = DEFAULT_MAX_VALUE_REPR) -> Optional[str]:
    """Bounded description of an offending value for diagnostic reports."""
    if value is None:
        return None
    text = f"{type(value).__name__}: {value!r}"
    if len(text) > limit:
        text = text[: limit - 3] + "..."
    return text


class ValidationFailure(BaseModel):
    """
    Structured, serializable description of the first violated rule.

    Example:
    {
        "rule": "MissingRequiredField",
        "path": "credentialSubject.ipPoolId",
        "message": "field required"
    }
    """

    rule: ErrorCode
    path: str
    message: str
    value: Optional[str] = None
    candidates: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True, exclude_defaults=False)


class CredentialValidationError(ValueError):
    """Base class for all credential validation errors."""

    code: ErrorCode = ErrorCode.TYPE_MISMATCH

    def __init__(
        self,
        path: str,
        message: str,
        value: Any = None,
        candidates: Optional[List[str]] = None,
        limit: int = DEFAULT_MAX_VALUE_REPR,
    ):
        super().__init__(f"{self.code.value} at {path or '<root>'}: {message}")
        self.failure = ValidationFailure(
            rule=self.code,
            path=path,
            message=message,
            value=describe_value(value, limit),
            candidates=list(candidates or []),
        )

    @property
    def path(self) -> str:
        return self.failure.path

    @property
    def rule(self) -> ErrorCode:
        return self.failure.rule


class UnknownCredentialType(CredentialValidationError):
    code = ErrorCode.UNKNOWN_CREDENTIAL_TYPE


class MissingRequiredField(CredentialValidationError):
    code = ErrorCode.MISSING_REQUIRED_FIELD


class TypeMismatch(CredentialValidationError):
    code = ErrorCode.TYPE_MISMATCH


class AmbiguousSubjectType(CredentialValidationError):
    code = ErrorCode.AMBIGUOUS_SUBJECT_TYPE

    @property
    def candidates(self) -> List[str]:
        return list(self.failure.candidates)


class MalformedResource(CredentialValidationError):
    code = ErrorCode.MALFORMED_RESOURCE


class TemporalInvariantViolation(CredentialValidationError):
    code = ErrorCode.TEMPORAL_INVARIANT_VIOLATION

