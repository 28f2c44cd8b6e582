"""Stock first-party caveats.

Each caveat is a frozen Pydantic model tagged with a ``type`` literal; the
tagged union :data:`StandardCaveat` lets a token mix them freely and lets
:data:`STANDARD_CAVEATS` decode them back from JSON.  All of them check a
:class:`RequestContext`.

============  =================  ==========================================
Class         ``type`` tag       Accepts the request when
============  =================  ==========================================
ReadOnly      ``readonly``       ``context.is_write`` is false
PathPrefix    ``path``           ``context.path`` equals or lies below ``path``
Actions       ``actions``        ``context.action`` is listed
ResourceIds   ``resource-id``    ``context.resource_id`` is listed
ExpiresAt     ``expires``        ``context.now`` is before ``not_after``
============  =================  ==========================================

Caveats never read the clock themselves; the current time arrives in the
context so that encoding and evaluation stay deterministic.
"""
from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, TypeAdapter

from macaroon_chain.caveats.base import CaveatModel, CaveatViolation

logger = logging.getLogger(__name__)

_RELATIVE_SEGMENTS = frozenset({".", ".."})


class RequestContext(BaseModel):
    """What the bearer is attempting, as seen by the verifier."""

    model_config = ConfigDict(frozen=True)

    path: str | None = None
    action: str | None = None
    is_write: bool = False
    resource_id: str | None = None
    now: AwareDatetime = Field(default_factory=lambda: datetime.now(UTC))


# ---------------------------------------------------------------------------
# Caveats
# ---------------------------------------------------------------------------

class ReadOnly(CaveatModel):
    """Forbid write requests."""

    type: Literal["readonly"] = "readonly"

    def verify(self, context: RequestContext) -> None:
        if context.is_write:
            raise CaveatViolation(self.type, "You can only read")


class PathPrefix(CaveatModel):
    """Restrict requests to ``path`` and everything below it.

    Request paths containing ``.`` or ``..`` segments are rejected rather
    than resolved.
    """

    type: Literal["path"] = "path"
    path: str = Field(min_length=1)

    def verify(self, context: RequestContext) -> None:
        if context.path is None:
            raise CaveatViolation(self.type, "request has no path")
        if any(segment in _RELATIVE_SEGMENTS for segment in context.path.split("/")):
            raise CaveatViolation(
                self.type,
                f"You can only access path {self.path}; relative segments are not allowed",
            )
        prefix = self.path.rstrip("/") + "/"
        if context.path != self.path and not context.path.startswith(prefix):
            raise CaveatViolation(self.type, f"You can only access path {self.path}")


class Actions(CaveatModel):
    """Restrict requests to the listed actions."""

    type: Literal["actions"] = "actions"
    actions: tuple[str, ...] = Field(min_length=1)

    def verify(self, context: RequestContext) -> None:
        if context.action not in self.actions:
            raise CaveatViolation(
                self.type,
                f"action {context.action!r} is not one of {list(self.actions)}",
            )


class ResourceIds(CaveatModel):
    """Restrict requests to the listed resource identifiers."""

    type: Literal["resource-id"] = "resource-id"
    ids: tuple[str, ...] = Field(min_length=1)

    def verify(self, context: RequestContext) -> None:
        if context.resource_id not in self.ids:
            raise CaveatViolation(self.type, f"resource {context.resource_id!r} is not permitted")


class ExpiresAt(CaveatModel):
    """Reject requests at or after ``not_after``."""

    type: Literal["expires"] = "expires"
    not_after: AwareDatetime

    def verify(self, context: RequestContext) -> None:
        if context.now >= self.not_after:
            logger.debug("Expiry reached: now=%s not_after=%s", context.now, self.not_after)
            raise CaveatViolation(self.type, f"token expired at {self.not_after.isoformat()}")


# ---------------------------------------------------------------------------
# Tagged union
# ---------------------------------------------------------------------------

StandardCaveat = Annotated[
    ReadOnly | PathPrefix | Actions | ResourceIds | ExpiresAt,
    Field(discriminator="type"),
]
"""Any stock caveat, discriminated on its ``type`` tag."""

STANDARD_CAVEATS: TypeAdapter[StandardCaveat] = TypeAdapter(StandardCaveat)
"""Adapter decoding and dumping :data:`StandardCaveat` values."""
