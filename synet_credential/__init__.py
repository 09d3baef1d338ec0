"""
Synet Credential - Typed verifiable credential model for the Synet network.
"""

__version__ = "0.1.0"

from synet_credential.credential import SynetVerifiableCredential  # noqa: E402
from synet_credential.errors import (  # noqa: E402
    AmbiguousSubjectType,
    CredentialValidationError,
    ErrorCode,
    MalformedResource,
    MissingRequiredField,
    TemporalInvariantViolation,
    TypeMismatch,
    UnknownCredentialType,
    ValidationFailure,
)
from synet_credential.models import (  # noqa: E402
    CredentialDelegation,
    CredentialFamily,
    CredentialType,
    Intelligence,
    ProofType,
    SynetHolder,
    VerifiableResource,
)
from synet_credential.registry import classify, resolve_subject_type, shape_for  # noqa: E402
from synet_credential.validator import check_credential, validate_credential  # noqa: E402

__all__ = [
    "AmbiguousSubjectType",
    "CredentialDelegation",
    "CredentialFamily",
    "CredentialType",
    "CredentialValidationError",
    "ErrorCode",
    "Intelligence",
    "MalformedResource",
    "MissingRequiredField",
    "ProofType",
    "SynetHolder",
    "SynetVerifiableCredential",
    "TemporalInvariantViolation",
    "TypeMismatch",
    "UnknownCredentialType",
    "ValidationFailure",
    "VerifiableResource",
    "check_credential",
    "classify",
    "resolve_subject_type",
    "shape_for",
    "validate_credential",
]
