"""MAC algorithm registry.

The signature chain only needs a keyed MAC whose output can be fed back in
as the next key.  HMAC over any of the registered hash functions satisfies
that; the primitive itself comes from :mod:`cryptography`.

Each call builds a fresh HMAC context, so algorithm objects hold no mutable
state and can be shared freely between threads.
"""
from __future__ import annotations

from collections.abc import Callable
from types import MappingProxyType

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as _hmac

from macaroon_chain.core.interfaces import MacAlgorithm


class HmacAlgorithm:
    """HMAC over a :mod:`cryptography` hash.

    Parameters
    ----------
    name:
        Registry identifier, e.g. ``"hmac-sha256"``.
    hash_factory:
        Zero-argument callable returning a fresh
        :class:`~cryptography.hazmat.primitives.hashes.HashAlgorithm`.
    """

    __slots__ = ("_digest_size", "_hash_factory", "_name")

    def __init__(self, name: str, hash_factory: Callable[[], hashes.HashAlgorithm]) -> None:
        self._name = name
        self._hash_factory = hash_factory
        self._digest_size = hash_factory().digest_size

    @property
    def name(self) -> str:
        return self._name

    @property
    def digest_size(self) -> int:
        return self._digest_size

    def mac(self, key: bytes, message: bytes) -> bytes:
        """Compute HMAC(*key*, *message*)."""
        ctx = _hmac.HMAC(key, self._hash_factory())
        ctx.update(message)
        return ctx.finalize()

    def __repr__(self) -> str:
        return f"HmacAlgorithm({self._name!r})"


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

ALGORITHM_REGISTRY: MappingProxyType[str, MacAlgorithm] = MappingProxyType({
    "hmac-sha256": HmacAlgorithm("hmac-sha256", hashes.SHA256),
    "hmac-sha384": HmacAlgorithm("hmac-sha384", hashes.SHA384),
    "hmac-sha512": HmacAlgorithm("hmac-sha512", hashes.SHA512),
    "hmac-sha3-256": HmacAlgorithm("hmac-sha3-256", hashes.SHA3_256),
})
"""Read-only map from algorithm identifier to algorithm object."""

DEFAULT_ALGORITHM = "hmac-sha256"


def resolve_algorithm(algorithm: str | MacAlgorithm | None = None) -> MacAlgorithm:
    """Resolve an algorithm identifier to its algorithm object.

    ``None`` selects :data:`DEFAULT_ALGORITHM`; an object satisfying
    :class:`MacAlgorithm` is returned unchanged.

    Raises
    ------
    ValueError
        If *algorithm* is a string that is not registered.
    TypeError
        If *algorithm* is neither a string nor a MAC algorithm.
    """
    if algorithm is None:
        algorithm = DEFAULT_ALGORITHM
    if isinstance(algorithm, str):
        found = ALGORITHM_REGISTRY.get(algorithm)
        if found is None:
            msg = f"Unknown MAC algorithm: {algorithm}"
            raise ValueError(msg)
        return found
    if isinstance(algorithm, MacAlgorithm):
        return algorithm
    msg = f"Expected an algorithm name or MacAlgorithm, got {type(algorithm).__name__}"
    raise TypeError(msg)
