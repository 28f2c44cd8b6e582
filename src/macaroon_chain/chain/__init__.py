"""Signature chain primitives.

This subpackage provides everything below the :class:`Macaroon` type:

* **Algorithms** -- the MAC registry and :class:`HmacAlgorithm`
  (:mod:`~macaroon_chain.chain.algorithms`).
* **Encoding** -- canonical JSON and the identifier/caveat byte encodings
  (:mod:`~macaroon_chain.chain.encoding`).
* **Engine** -- root and link derivation, folds and replay
  (:mod:`~macaroon_chain.chain.engine`).
"""
from __future__ import annotations

from macaroon_chain.chain.algorithms import (
    ALGORITHM_REGISTRY,
    DEFAULT_ALGORITHM,
    HmacAlgorithm,
    resolve_algorithm,
)
from macaroon_chain.chain.encoding import (
    canonical_json,
    encode_caveat,
    encode_identifier,
)
from macaroon_chain.chain.engine import (
    derive_link,
    derive_root,
    fold_caveats,
    replay_chain,
    signatures_match,
)

__all__ = [
    # Algorithms
    "ALGORITHM_REGISTRY",
    "DEFAULT_ALGORITHM",
    "HmacAlgorithm",
    "resolve_algorithm",
    # Encoding
    "canonical_json",
    "encode_caveat",
    "encode_identifier",
    # Engine
    "derive_link",
    "derive_root",
    "fold_caveats",
    "replay_chain",
    "signatures_match",
]
