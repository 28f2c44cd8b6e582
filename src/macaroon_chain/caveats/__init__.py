"""First-party caveats.

* **Base classes** -- :class:`CaveatModel` (canonical-JSON encoding for
  Pydantic caveats), :class:`OpaqueCaveat` and :class:`CaveatViolation`
  (:mod:`~macaroon_chain.caveats.base`).
* **Stock caveats** -- read-only, path, action, resource and expiry
  restrictions over a :class:`RequestContext`, combined in the tagged union
  :data:`StandardCaveat` (:mod:`~macaroon_chain.caveats.standard`).

Applications with their own restriction kinds subclass
:class:`CaveatModel`, give each variant a distinct ``type`` literal, and
build their own discriminated union the same way.
"""
from __future__ import annotations

from macaroon_chain.caveats.base import CaveatModel, CaveatViolation, OpaqueCaveat
from macaroon_chain.caveats.standard import (
    STANDARD_CAVEATS,
    Actions,
    ExpiresAt,
    PathPrefix,
    ReadOnly,
    RequestContext,
    ResourceIds,
    StandardCaveat,
)

__all__ = [
    # Base
    "CaveatModel",
    "CaveatViolation",
    "OpaqueCaveat",
    # Stock caveats
    "Actions",
    "ExpiresAt",
    "PathPrefix",
    "ReadOnly",
    "RequestContext",
    "ResourceIds",
    "STANDARD_CAVEATS",
    "StandardCaveat",
]
