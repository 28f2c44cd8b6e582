"""The :class:`Macaroon` token type.

A macaroon is an identifier, an ordered tuple of caveats, and the signature
obtained by folding them into a MAC chain that starts from a secret root
key.  Instances are immutable: :meth:`Macaroon.attenuate` returns a new
token and leaves the original valid, so one base token can be narrowed
differently by different holders.

Example::

    from macaroon_chain import Macaroon
    from macaroon_chain.caveats import ReadOnly, RequestContext

    key = b"mysecretkey"
    token = Macaroon.new(key, "user-42").attenuate(ReadOnly())

    token.verify(key, RequestContext(is_write=False))   # passes
    token.verify(key, RequestContext(is_write=True))    # CaveatRejected
"""
from __future__ import annotations

import hmac
import logging
from collections.abc import Iterable
from typing import Any, Generic, TypeVar

from macaroon_chain.chain.algorithms import resolve_algorithm
from macaroon_chain.chain.encoding import encode_caveat, encode_identifier
from macaroon_chain.chain.engine import derive_link, derive_root
from macaroon_chain.core.config import DEFAULT_CONFIG, MacaroonConfig
from macaroon_chain.core.errors import EncodingFailure
from macaroon_chain.core.interfaces import Encodable, MacAlgorithm
from macaroon_chain.core.keys import RootKey
from macaroon_chain.core.types import Identifier
from macaroon_chain.verifier import verify_macaroon

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=Encodable)


class Macaroon(Generic[C]):
    """An attenuable bearer token.

    Build tokens with :meth:`new`.  The constructor takes a ready-made
    signature and exists for codecs restoring a token from the wire; such a
    token is untrusted until :meth:`verify` succeeds.

    Parameters
    ----------
    identifier:
        Issuer-chosen name of the token (``str`` or ``bytes``).
    caveats:
        Caveats in the order they were appended.
    signature:
        Head of the MAC chain; its length must equal the algorithm's
        digest size.
    algorithm:
        Registered algorithm name or :class:`MacAlgorithm` object.
        Defaults to ``"hmac-sha256"``.
    """

    __slots__ = ("_algorithm", "_caveats", "_identifier", "_signature")

    def __init__(
        self,
        identifier: Identifier,
        caveats: Iterable[C],
        signature: bytes,
        *,
        algorithm: str | MacAlgorithm | None = None,
    ) -> None:
        encode_identifier(identifier)
        algo = resolve_algorithm(algorithm)
        signature = bytes(signature)
        if len(signature) != algo.digest_size:
            raise EncodingFailure(
                f"Signature must be {algo.digest_size} bytes for {algo.name}, "
                f"got {len(signature)}",
                details={"algorithm": algo.name, "length": len(signature)},
            )
        if isinstance(identifier, bytearray):
            identifier = bytes(identifier)
        object.__setattr__(self, "_identifier", identifier)
        object.__setattr__(self, "_caveats", tuple(caveats))
        object.__setattr__(self, "_signature", signature)
        object.__setattr__(self, "_algorithm", algo)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def new(
        cls,
        key: RootKey,
        identifier: Identifier,
        *,
        algorithm: str | MacAlgorithm | None = None,
        config: MacaroonConfig | None = None,
    ) -> Macaroon[C]:
        """Mint a caveat-free token from a root key.

        This is the only operation that consumes the root key; the key is
        not retained.

        Parameters
        ----------
        key:
            Root secret.  ``str`` keys are UTF-8 encoded.
        identifier:
            Token name, typically used by the verifier to look up *key*.
        algorithm:
            Overrides ``config.algorithm``.
        config:
            Defaults to :data:`~macaroon_chain.core.config.DEFAULT_CONFIG`.

        Raises
        ------
        InvalidKey
            If *key* is empty or shorter than ``config.min_key_length``.
        EncodingFailure
            If *identifier* is neither ``str`` nor ``bytes``.
        """
        cfg = config or DEFAULT_CONFIG
        algo = resolve_algorithm(algorithm if algorithm is not None else cfg.algorithm)
        signature = derive_root(key, identifier, algo, min_key_length=cfg.min_key_length)
        logger.debug("Minted macaroon %r using %s", identifier, algo.name)
        return cls(identifier, (), signature, algorithm=algo)

    # ------------------------------------------------------------------
    # Attenuation
    # ------------------------------------------------------------------

    def attenuate(self, caveat: C) -> Macaroon[C]:
        """Return a copy of this token restricted by one more caveat.

        Needs no key.  ``self`` is left unchanged.

        Raises
        ------
        EncodingFailure
            If *caveat* cannot be encoded.
        """
        signature = derive_link(self._signature, encode_caveat(caveat), self._algorithm)
        logger.debug(
            "Attenuated macaroon %r with %s (caveat %d)",
            self._identifier,
            type(caveat).__name__,
            len(self._caveats),
        )
        return type(self)(
            self._identifier,
            (*self._caveats, caveat),
            signature,
            algorithm=self._algorithm,
        )

    def attenuate_all(self, caveats: Iterable[C]) -> Macaroon[C]:
        """Append several caveats in iteration order."""
        macaroon = self
        for caveat in caveats:
            macaroon = macaroon.attenuate(caveat)
        return macaroon

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def verify(
        self,
        key: RootKey,
        context: Any,
        *,
        config: MacaroonConfig | None = None,
    ) -> None:
        """Check the signature, then every caveat against *context*.

        See :func:`macaroon_chain.verifier.verify_macaroon`.
        """
        verify_macaroon(self, key, context, config=config)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def identifier(self) -> Identifier:
        return self._identifier

    @property
    def caveats(self) -> tuple[C, ...]:
        return self._caveats

    @property
    def signature(self) -> bytes:
        return self._signature

    @property
    def algorithm(self) -> MacAlgorithm:
        return self._algorithm

    def tail(self) -> bytes:
        """Return the current head of the signature chain."""
        return self._signature

    # ------------------------------------------------------------------
    # Value semantics
    # ------------------------------------------------------------------

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __copy__(self) -> Macaroon[C]:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> Macaroon[C]:
        return self

    def __eq__(self, other: object) -> bool:
        """Tokens are equal when identifier, algorithm and signature match.

        The signature binds every caveat, so equal signatures imply equal
        caveat encodings.
        """
        if not isinstance(other, Macaroon):
            return NotImplemented
        return (
            self._identifier == other._identifier
            and self._algorithm.name == other._algorithm.name
            and hmac.compare_digest(self._signature, other._signature)
        )

    def __hash__(self) -> int:
        return hash((self._identifier, self._algorithm.name, self._signature))

    def __repr__(self) -> str:
        return (
            f"Macaroon(identifier={self._identifier!r}, "
            f"caveats={len(self._caveats)}, "
            f"algorithm={self._algorithm.name!r})"
        )
