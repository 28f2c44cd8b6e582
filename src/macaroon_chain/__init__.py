"""macaroon-chain -- attenuable bearer tokens from chained MACs.

A macaroon starts from a secret root key and an identifier.  Anyone holding
it can append caveats that narrow what it authorises, without ever seeing
the key; only the holder of the key can verify it.

Modules
-------
* :mod:`macaroon_chain.macaroon` -- the :class:`Macaroon` token type.
* :mod:`macaroon_chain.verifier` -- chain replay and caveat evaluation.
* :mod:`macaroon_chain.chain` -- MAC algorithms, encodings, link derivation.
* :mod:`macaroon_chain.caveats` -- stock first-party caveats.
* :mod:`macaroon_chain.wire` -- JSON token codec.
"""
from __future__ import annotations

import logging

__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# Core -- errors, config, keys, interfaces
# ---------------------------------------------------------------------------
from macaroon_chain.core.config import DEFAULT_CONFIG, MacaroonConfig
from macaroon_chain.core.errors import (
    CaveatRejected,
    EncodingFailure,
    InvalidKey,
    MacaroonError,
    SignatureMismatch,
    VerificationError,
)
from macaroon_chain.core.interfaces import Caveat, Encodable, MacAlgorithm
from macaroon_chain.core.keys import SecretKey

# ---------------------------------------------------------------------------
# Signature chain
# ---------------------------------------------------------------------------
from macaroon_chain.chain import (
    ALGORITHM_REGISTRY,
    HmacAlgorithm,
    canonical_json,
    resolve_algorithm,
)

# ---------------------------------------------------------------------------
# Token and verification
# ---------------------------------------------------------------------------
from macaroon_chain.macaroon import Macaroon
from macaroon_chain.verifier import (
    VerificationResult,
    Verifier,
    check_macaroon,
    verify_macaroon,
)

# ---------------------------------------------------------------------------
# Wire
# ---------------------------------------------------------------------------
from macaroon_chain.wire import MacaroonCodec

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Meta
    "__version__",
    # Config
    "DEFAULT_CONFIG",
    "MacaroonConfig",
    # Errors
    "CaveatRejected",
    "EncodingFailure",
    "InvalidKey",
    "MacaroonError",
    "SignatureMismatch",
    "VerificationError",
    # Interfaces & keys
    "Caveat",
    "Encodable",
    "MacAlgorithm",
    "SecretKey",
    # Chain
    "ALGORITHM_REGISTRY",
    "HmacAlgorithm",
    "canonical_json",
    "resolve_algorithm",
    # Token
    "Macaroon",
    "VerificationResult",
    "Verifier",
    "check_macaroon",
    "verify_macaroon",
    # Wire
    "MacaroonCodec",
]
