"""macaroon-chain configuration.

Defines the validated configuration model read by macaroon creation, the
verifier and the wire codec.  A default-constructed instance is suitable
for most deployments.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MacaroonConfig(BaseModel):
    """Configuration shared by issuers, verifiers and codecs."""

    model_config = ConfigDict(strict=True, frozen=True)

    algorithm: str = Field(
        default="hmac-sha256",
        description=(
            "Registered MAC algorithm used when none is passed explicitly."
        ),
    )
    min_key_length: int = Field(
        default=1,
        ge=1,
        description="Shortest root key, in bytes, accepted at creation and verification.",
    )
    max_caveats: int = Field(
        default=256,
        ge=0,
        description=(
            "Maximum number of caveats accepted when decoding or verifying "
            "a token."
        ),
    )
    max_token_bytes: int = Field(
        default=64 * 1024,  # 64 KiB
        ge=1,
        description="Maximum accepted serialized token size in bytes.",
    )

    @field_validator("algorithm")
    @classmethod
    def _known_algorithm(cls, value: str) -> str:
        from macaroon_chain.chain.algorithms import ALGORITHM_REGISTRY

        if value not in ALGORITHM_REGISTRY:
            msg = f"Unknown MAC algorithm: {value}"
            raise ValueError(msg)
        return value


DEFAULT_CONFIG = MacaroonConfig()
"""Configuration used when a caller passes ``config=None``."""
