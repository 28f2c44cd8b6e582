"""Base classes for JSON-shaped caveats.

:class:`CaveatModel` gives any Pydantic model the ``encode()`` half of the
caveat capability: the canonical JSON of its JSON-mode dump.  Subclasses
declare a ``type`` literal field so that different variants can never
encode to the same bytes, and add a ``verify`` method.

:class:`OpaqueCaveat` wraps a raw JSON value.  It encodes exactly like the
typed caveat with the same JSON form, which lets a client that does not
know the issuer's caveat schema decode a token, attenuate it and pass it
on.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, RootModel

from macaroon_chain.chain.encoding import canonical_json


class CaveatViolation(Exception):
    """Raised by a caveat's ``verify`` when the context is not permitted.

    Parameters
    ----------
    caveat_type:
        The ``type`` tag of the rejecting caveat.
    reason:
        Human-readable explanation.
    """

    def __init__(self, caveat_type: str, reason: str) -> None:
        self.caveat_type = caveat_type
        self.reason = reason
        super().__init__(f"{caveat_type}: {reason}")


class CaveatModel(BaseModel):
    """Immutable Pydantic caveat encoded as canonical JSON."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    def encode(self) -> bytes:
        """Return the UTF-8 bytes of the canonical JSON dump."""
        return canonical_json(self.model_dump(mode="json")).encode("utf-8")


class OpaqueCaveat(RootModel[Any]):
    """A caveat known only by its JSON value.

    Attenuation works as for any caveat.  Verification always rejects,
    since an opaque value carries no predicate; verifiers decode tokens
    with their own typed caveats instead.
    """

    model_config = ConfigDict(frozen=True)

    def encode(self) -> bytes:
        return canonical_json(self.model_dump(mode="json")).encode("utf-8")

    def verify(self, context: Any) -> None:
        raise CaveatViolation("opaque", "caveat has no predicate on this side")
