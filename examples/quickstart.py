#!/usr/bin/env python3
"""macaroon-chain quickstart.

Demonstrates the core workflow of attenuable bearer tokens:

1. Mint a token from a secret root key.
2. Attenuate it with stock caveats (no key needed).
3. Serialise it for a client.
4. Let the client narrow it further without understanding its caveats.
5. Verify requests against the returned token.

Run:
    python examples/quickstart.py
"""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from pydantic import TypeAdapter

from macaroon_chain import Macaroon, MacaroonCodec, SecretKey, Verifier
from macaroon_chain.caveats import (
    STANDARD_CAVEATS,
    ExpiresAt,
    OpaqueCaveat,
    PathPrefix,
    RequestContext,
)


def main() -> None:
    root_key = SecretKey(b"quickstart-root-key-keep-me-safe")

    # -- Step 1: Mint a token ------------------------------------------------
    token = Macaroon.new(root_key, "user-42")
    print(f"[1] Minted: {token!r}")

    # -- Step 2: Attenuate ---------------------------------------------------
    expiry = datetime.now(UTC) + timedelta(hours=1)
    token = token.attenuate_all([PathPrefix(path="/docs"), ExpiresAt(not_after=expiry)])
    print(f"[2] Attenuated: {token!r}")

    # -- Step 3: Serialise for a client -------------------------------------
    server_codec = MacaroonCodec(STANDARD_CAVEATS)
    wire = server_codec.dumps(token)
    print(f"[3] Wire form: {wire}")

    # -- Step 4: Client narrows the token -----------------------------------
    client_codec = MacaroonCodec(TypeAdapter(OpaqueCaveat))
    held = client_codec.loads(wire)
    shared = held.attenuate(OpaqueCaveat({"type": "readonly"}))
    wire = client_codec.dumps(shared)
    print(f"[4] Client added a read-only caveat ({len(shared.caveats)} caveats)")

    # -- Step 5: Verify requests ---------------------------------------------
    verifier = Verifier()
    presented = server_codec.loads(wire)
    requests = [
        RequestContext(path="/docs/report.pdf"),
        RequestContext(path="/docs/report.pdf", is_write=True),
        RequestContext(path="/admin"),
    ]
    for context in requests:
        result = verifier.check(presented, root_key, context)
        verdict = "ALLOW" if result.valid else f"DENY ({result.error})"
        print(f"[5] {context.path} write={context.is_write}: {verdict}")

    root_key.wipe()
    print("[6] Root key wiped")


if __name__ == "__main__":
    main()
