"""Structural interfaces consumed by the signature chain.

This module defines the capabilities the engine is written against, as
``typing.Protocol`` classes:

* :class:`MacAlgorithm` -- a keyed, re-keyable MAC primitive.
* :class:`Encodable` -- anything that can be appended to a macaroon.
* :class:`Caveat` -- an encodable restriction that can also be verified
  against an application-defined context.

Every Protocol class is decorated with ``@runtime_checkable`` so that
``isinstance`` checks work at run-time in addition to static analysis.
Note that run-time checks only test for the presence of the methods.
"""
from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

ContextT_contra = TypeVar("ContextT_contra", contravariant=True)


@runtime_checkable
class MacAlgorithm(Protocol):
    """Keyed MAC with fixed-size output usable as the next call's key."""

    @property
    def name(self) -> str:
        """Registry identifier, e.g. ``"hmac-sha256"``."""
        ...

    @property
    def digest_size(self) -> int:
        """Length in bytes of every tag produced by :meth:`mac`."""
        ...

    def mac(self, key: bytes, message: bytes) -> bytes:
        """Return the tag of *message* under *key*.

        Implementations MUST NOT keep state between calls.
        """
        ...


@runtime_checkable
class Encodable(Protocol):
    """A value that can be folded into a signature chain.

    This is all a client needs to attenuate a token; predicates are only
    required on the verifying side.
    """

    def encode(self) -> bytes:
        """Return the canonical bytes hashed into the chain.

        MUST be deterministic: no clocks, no external mutable state, no
        dependence on dict or set iteration order.  Two semantically
        different values MUST NOT encode identically.
        """
        ...


@runtime_checkable
class Caveat(Encodable, Protocol[ContextT_contra]):
    """A first-party restriction predicate."""

    def verify(self, context: ContextT_contra) -> None:
        """Check the caveat against *context*.

        Return normally to accept; raise any exception to reject.  The
        exception is reported to the verifier's caller as the cause of a
        :class:`~macaroon_chain.core.errors.CaveatRejected`.  Returning
        ``False`` also rejects (the cause is a ``ValueError``); any other
        return value is ignored.
        """
        ...
