"""Signature chain derivation.

This module implements the chained MAC at the heart of a macaroon::

    sig[0] = MAC(root_key, identifier)
    sig[n] = MAC(sig[n-1], encode(caveat[n]))

Each link re-keys the MAC with the previous link's output, so extending a
chain needs only the current signature while the final signature still
depends on the root key and on every caveat in order.

All functions are pure: they read their arguments, return bytes, and keep
no state.
"""
from __future__ import annotations

import hmac
from collections.abc import Iterable

from macaroon_chain.chain.encoding import encode_caveat, encode_identifier
from macaroon_chain.core.interfaces import Encodable, MacAlgorithm
from macaroon_chain.core.keys import RootKey, key_bytes
from macaroon_chain.core.types import Identifier


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------

def derive_root(
    key: RootKey,
    identifier: Identifier,
    algorithm: MacAlgorithm,
    *,
    min_key_length: int = 1,
) -> bytes:
    """Compute the first signature of a chain.

    Raises
    ------
    InvalidKey
        If *key* is empty, shorter than *min_key_length*, wiped, or of an
        unsupported type.
    EncodingFailure
        If *identifier* is neither ``str`` nor ``bytes``.
    """
    raw_key = key_bytes(key, min_length=min_key_length)
    return algorithm.mac(raw_key, encode_identifier(identifier))


def derive_link(prev: bytes, caveat_bytes: bytes, algorithm: MacAlgorithm) -> bytes:
    """Compute the signature following *prev* for an encoded caveat."""
    return algorithm.mac(prev, caveat_bytes)


# ---------------------------------------------------------------------------
# Folds
# ---------------------------------------------------------------------------

def fold_caveats(
    signature: bytes,
    caveats: Iterable[Encodable],
    algorithm: MacAlgorithm,
) -> bytes:
    """Fold every caveat, in order, into *signature*.

    Raises
    ------
    EncodingFailure
        If any caveat fails to encode.
    """
    for caveat in caveats:
        signature = derive_link(signature, encode_caveat(caveat), algorithm)
    return signature


def replay_chain(
    key: RootKey,
    identifier: Identifier,
    caveats: Iterable[Encodable],
    algorithm: MacAlgorithm,
    *,
    min_key_length: int = 1,
) -> bytes:
    """Recompute a macaroon's signature from its root key.

    This is the verifier's half of the chain: the result must equal the
    presented signature for the token to be authentic.
    """
    signature = derive_root(key, identifier, algorithm, min_key_length=min_key_length)
    return fold_caveats(signature, caveats, algorithm)


def signatures_match(expected: bytes, actual: bytes) -> bool:
    """Compare two signatures in constant time."""
    return hmac.compare_digest(expected, actual)
