from __future__ import annotations

import os
from typing import Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, Field

from synet_credential.errors import DEFAULT_MAX_VALUE_REPR

Web2MirrorPolicy = Literal["allow", "warn", "reject"]

ENV_PREFIX = "SYNET_VC_"


class ValidatorConfig(BaseModel):
    """
    Knobs for the normalizer and validator.

    The core never reads the environment on its own; callers pass a config
    (or get the defaults). `from_env` exists for front ends such as the CLI.
    """

    ipfs_schemes: Tuple[str, ...] = ("ipfs",)
    web2_mirrors: Web2MirrorPolicy = "warn"
    max_value_repr: int = Field(default=DEFAULT_MAX_VALUE_REPR, ge=16)

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> ValidatorConfig:
        """
        Build a config from SYNET_VC_* variables.

        SYNET_VC_IPFS_SCHEMES   comma separated, e.g. "ipfs,ipns"
        SYNET_VC_WEB2_MIRRORS   allow | warn | reject
        SYNET_VC_MAX_VALUE_REPR integer

        Raises ValueError (or pydantic ValidationError) for bad values.
        """
        env = os.environ if environ is None else environ
        values = {}
        schemes = env.get(f"{ENV_PREFIX}IPFS_SCHEMES")
        if schemes:
            values["ipfs_schemes"] = tuple(s.strip().lower() for s in schemes.split(",") if s.strip())
        policy = env.get(f"{ENV_PREFIX}WEB2_MIRRORS")
        if policy:
            values["web2_mirrors"] = policy.strip().lower()
        limit = env.get(f"{ENV_PREFIX}MAX_VALUE_REPR")
        if limit:
            try:
                values["max_value_repr"] = int(limit)
            except ValueError:
                raise ValueError(f"{ENV_PREFIX}MAX_VALUE_REPR must be an integer, got {limit!r}") from None
        return cls(**values)


DEFAULT_CONFIG = ValidatorConfig()
