"""Shared fixtures for macaroon-chain conformance tests.

Provides root keys, identifiers and the typed caveats used across the
property suites.
"""
from __future__ import annotations

from typing import Annotated, Literal

import pytest
from pydantic import Field, TypeAdapter

from macaroon_chain import Macaroon
from macaroon_chain.caveats import CaveatModel, CaveatViolation

# ---------------------------------------------------------------------------
# Test caveats
# ---------------------------------------------------------------------------


class BoolCaveat(CaveatModel):
    """Passes exactly when ``value`` is true; ignores the context."""

    type: Literal["bool"] = "bool"
    value: bool

    def verify(self, context: object) -> None:
        if not self.value:
            raise CaveatViolation(self.type, "value is false")


class RangeCaveat(CaveatModel):
    """Accepts integer contexts in the half-open interval ``[low, high)``."""

    type: Literal["range"] = "range"
    low: int
    high: int

    def verify(self, context: int) -> None:
        if not self.low <= context < self.high:
            raise CaveatViolation(self.type, f"{context} not in [{self.low}, {self.high})")


ConformanceCaveat = Annotated[BoolCaveat | RangeCaveat, Field(discriminator="type")]
TEST_CAVEATS: TypeAdapter[ConformanceCaveat] = TypeAdapter(ConformanceCaveat)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def root_key() -> bytes:
    return b"conformance-root-key-32-bytes!!!"


@pytest.fixture()
def other_key() -> bytes:
    return b"conformance-other-key-32-bytes!!"


@pytest.fixture()
def identifier() -> str:
    return "conformance-token"


@pytest.fixture()
def base(root_key: bytes, identifier: str) -> Macaroon:
    return Macaroon.new(root_key, identifier)
