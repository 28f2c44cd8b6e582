"""Token serialisation.

Provides :class:`MacaroonCodec`, which maps macaroons to and from the JSON
wire array, plus the base64url signature helpers it uses.
"""
from __future__ import annotations

from macaroon_chain.wire.codec import MacaroonCodec, decode_signature, encode_signature

__all__ = [
    "MacaroonCodec",
    "decode_signature",
    "encode_signature",
]
