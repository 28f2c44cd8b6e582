"""Shared value types.

``Identifier`` is an alias rather than a class so that plain ``str`` and
``bytes`` values flow through the API without wrapping.
"""
from __future__ import annotations

Identifier = str | bytes
"""Issuer-chosen macaroon name; ``str`` values are UTF-8 encoded for the MAC."""
