"""Tests for the JSON token codec.

This module covers the wire subpackage:

1. **Signature text** -- padded base64url in both directions, malformed
   input.
2. **Encoding** -- wire array layout, identifier and algorithm checks.
3. **Decoding** -- shape validation, caveat validation, size limits,
   signature length.
4. **Client-side attenuation** -- a holder that only knows caveats as raw
   JSON can still narrow a token the issuer later accepts.
"""
from __future__ import annotations

import json

import pytest
from pydantic import TypeAdapter

from macaroon_chain import Macaroon
from macaroon_chain.caveats import (
    STANDARD_CAVEATS,
    OpaqueCaveat,
    PathPrefix,
    ReadOnly,
    RequestContext,
)
from macaroon_chain.core.config import MacaroonConfig
from macaroon_chain.core.errors import CaveatRejected, EncodingFailure, SignatureMismatch
from macaroon_chain.wire import MacaroonCodec, decode_signature, encode_signature

KEY = b"wire-test-root-key"


@pytest.fixture()
def codec() -> MacaroonCodec:
    return MacaroonCodec(STANDARD_CAVEATS)


@pytest.fixture()
def token() -> Macaroon:
    return Macaroon.new(KEY, "user-7").attenuate_all([PathPrefix(path="/docs"), ReadOnly()])


# ===================================================================
# Signature text
# ===================================================================


class TestSignatureText:
    """Test base64url signature helpers."""

    def test_url_safe_alphabet(self) -> None:
        assert encode_signature(b"\xfb\xff") == "-_8="

    def test_padded(self) -> None:
        assert encode_signature(b"\x00") == "AA=="

    def test_decode(self) -> None:
        assert decode_signature("-_8=") == b"\xfb\xff"

    def test_full_signature(self) -> None:
        sig = bytes(range(32))
        assert decode_signature(encode_signature(sig)) == sig

    @pytest.mark.parametrize("text", ["!!!!", "AA", "A", "é"])
    def test_malformed(self, text: str) -> None:
        with pytest.raises(EncodingFailure, match="not valid base64url"):
            decode_signature(text)


# ===================================================================
# Encoding
# ===================================================================


class TestEncode:
    """Test MacaroonCodec encoding."""

    def test_wire_layout(self, codec: MacaroonCodec, token: Macaroon) -> None:
        assert codec.to_jsonable(token) == [
            "user-7",
            [{"type": "path", "path": "/docs"}, {"type": "readonly"}],
            encode_signature(token.signature),
        ]

    def test_dumps_is_compact_json(self, codec: MacaroonCodec, token: Macaroon) -> None:
        text = codec.dumps(token)
        assert " " not in text
        assert json.loads(text) == codec.to_jsonable(token)

    def test_non_ascii_identifier(self, codec: MacaroonCodec) -> None:
        m = Macaroon.new(KEY, "usér")
        assert codec.dumps(m).startswith('["usér"')

    def test_bytes_identifier_rejected(self, codec: MacaroonCodec) -> None:
        with pytest.raises(EncodingFailure, match="str identifier"):
            codec.dumps(Macaroon.new(KEY, b"raw-id"))

    def test_algorithm_mismatch_rejected(self, codec: MacaroonCodec) -> None:
        m = Macaroon.new(KEY, "id", algorithm="hmac-sha512")
        with pytest.raises(EncodingFailure, match="codec expects hmac-sha256"):
            codec.dumps(m)


# ===================================================================
# Decoding
# ===================================================================


class TestDecode:
    """Test MacaroonCodec decoding."""

    def test_restores_token(self, codec: MacaroonCodec, token: Macaroon) -> None:
        restored = codec.loads(codec.dumps(token))
        assert restored == token
        assert isinstance(restored.caveats[0], PathPrefix)
        assert isinstance(restored.caveats[1], ReadOnly)

    def test_restored_token_verifies(self, codec: MacaroonCodec, token: Macaroon) -> None:
        restored = codec.loads(codec.dumps(token))
        restored.verify(KEY, RequestContext(path="/docs/a"))
        with pytest.raises(CaveatRejected):
            restored.verify(KEY, RequestContext(path="/docs/a", is_write=True))

    def test_bytes_input(self, codec: MacaroonCodec, token: Macaroon) -> None:
        assert codec.loads(codec.dumps(token).encode("utf-8")) == token

    def test_restored_token_attenuates(self, codec: MacaroonCodec, token: Macaroon) -> None:
        restored = codec.loads(codec.dumps(token))
        narrowed = restored.attenuate(PathPrefix(path="/docs/mine"))
        assert narrowed == token.attenuate(PathPrefix(path="/docs/mine"))

    def test_tampered_caveat_fails_verification(
        self, codec: MacaroonCodec, token: Macaroon
    ) -> None:
        wire = codec.to_jsonable(token)
        wire[1][0]["path"] = "/"
        forged = codec.from_jsonable(wire)
        with pytest.raises(SignatureMismatch):
            forged.verify(KEY, RequestContext(path="/etc"))

    def test_other_algorithm(self) -> None:
        codec = MacaroonCodec(STANDARD_CAVEATS, algorithm="hmac-sha512")
        m = Macaroon.new(KEY, "id", algorithm="hmac-sha512").attenuate(ReadOnly())
        assert codec.algorithm.name == "hmac-sha512"
        assert codec.loads(codec.dumps(m)) == m

    def test_config_algorithm(self) -> None:
        codec = MacaroonCodec(STANDARD_CAVEATS, config=MacaroonConfig(algorithm="hmac-sha384"))
        assert codec.algorithm.name == "hmac-sha384"

    @pytest.mark.parametrize(
        "text",
        [
            "not json",
            "{}",
            '["id", []]',
            '["id", [], "AA==", 1]',
            '[1, [], "AA=="]',
            '["id", {}, "AA=="]',
            '["id", [], 7]',
        ],
    )
    def test_malformed(self, codec: MacaroonCodec, text: str) -> None:
        with pytest.raises(EncodingFailure):
            codec.loads(text)

    def test_invalid_utf8(self, codec: MacaroonCodec) -> None:
        with pytest.raises(EncodingFailure):
            codec.loads(b'["\xff"]')

    def test_oversized_integer(self, codec: MacaroonCodec) -> None:
        text = '["id",[{"type":"readonly","x":' + "9" * 5000 + '}],"AAAA"]'
        with pytest.raises(EncodingFailure, match="Invalid JSON") as exc_info:
            codec.loads(text)
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_deep_nesting(self, codec: MacaroonCodec) -> None:
        text = "[" * 30000 + "]" * 30000
        with pytest.raises(EncodingFailure, match="Invalid JSON") as exc_info:
            codec.loads(text)
        assert isinstance(exc_info.value.__cause__, RecursionError)

    def test_lone_surrogate_text(self, codec: MacaroonCodec) -> None:
        with pytest.raises(EncodingFailure, match="not valid Unicode") as exc_info:
            codec.loads('["\ud800",[],"AAAA"]')
        assert isinstance(exc_info.value.__cause__, UnicodeEncodeError)

    def test_escaped_surrogate_identifier(self, codec: MacaroonCodec) -> None:
        text = '["\\ud800",[],"' + encode_signature(b"\x00" * 32) + '"]'
        with pytest.raises(EncodingFailure, match="Identifier is not valid Unicode"):
            codec.loads(text)

    def test_unknown_caveat(self, codec: MacaroonCodec, token: Macaroon) -> None:
        wire = codec.to_jsonable(token)
        wire[1].append({"type": "admin"})
        with pytest.raises(EncodingFailure, match="Caveat 2 failed validation") as exc_info:
            codec.from_jsonable(wire)
        assert exc_info.value.details == {"index": 2}

    def test_wrong_signature_length(self, codec: MacaroonCodec) -> None:
        text = json.dumps(["id", [], encode_signature(b"\x00" * 16)])
        with pytest.raises(EncodingFailure, match="32 bytes"):
            codec.loads(text)

    def test_token_size_limit(self, token: Macaroon) -> None:
        codec = MacaroonCodec(STANDARD_CAVEATS, config=MacaroonConfig(max_token_bytes=32))
        text = MacaroonCodec(STANDARD_CAVEATS).dumps(token)
        with pytest.raises(EncodingFailure, match="at most 32 accepted"):
            codec.loads(text)

    def test_caveat_count_limit(self, token: Macaroon) -> None:
        codec = MacaroonCodec(STANDARD_CAVEATS, config=MacaroonConfig(max_caveats=1))
        with pytest.raises(EncodingFailure, match="2 caveats"):
            codec.from_jsonable(MacaroonCodec(STANDARD_CAVEATS).to_jsonable(token))


# ===================================================================
# Client-side attenuation
# ===================================================================


class TestOpaqueClient:
    """Test attenuation by a holder that cannot interpret caveats."""

    def test_client_refines_token(self, codec: MacaroonCodec, token: Macaroon) -> None:
        client_codec = MacaroonCodec(TypeAdapter(OpaqueCaveat))

        held = client_codec.loads(codec.dumps(token))
        assert all(isinstance(c, OpaqueCaveat) for c in held.caveats)
        assert held.signature == token.signature

        refined = held.attenuate(OpaqueCaveat({"type": "path", "path": "/docs/shared"}))
        received = codec.loads(client_codec.dumps(refined))

        received.verify(KEY, RequestContext(path="/docs/shared/a"))
        with pytest.raises(CaveatRejected) as exc_info:
            received.verify(KEY, RequestContext(path="/docs/other"))
        assert exc_info.value.index == 2

    def test_client_output_matches_typed(self, codec: MacaroonCodec, token: Macaroon) -> None:
        client_codec = MacaroonCodec(TypeAdapter(OpaqueCaveat))
        held = client_codec.loads(codec.dumps(token))
        refined = held.attenuate(OpaqueCaveat({"type": "readonly"}))
        assert refined.signature == token.attenuate(ReadOnly()).signature
