"""Canonical byte encodings fed into the signature chain.

The same bytes must be produced when a caveat is appended and when the chain
is replayed at verification time, or the two signatures silently diverge.
This module provides:

* :func:`canonical_json` -- an RFC 8785 (JCS) serialiser, the encoding used
  by every JSON-shaped caveat in this package.
* :func:`encode_identifier` -- identifier bytes for the root link.
* :func:`encode_caveat` -- a guarded call to a caveat's ``encode()``.
"""
from __future__ import annotations

import json
import math
from decimal import Decimal
from typing import Any

from macaroon_chain.core.errors import EncodingFailure
from macaroon_chain.core.interfaces import Encodable
from macaroon_chain.core.types import Identifier

# ---------------------------------------------------------------------------
# RFC 8785 canonical JSON serialisation
# ---------------------------------------------------------------------------

def _es_number(value: float) -> str:
    """Format a finite float as ECMAScript ``Number.prototype.toString`` does.

    ``repr`` already yields the shortest digits that round-trip, so only
    the placement of the decimal point and exponent needs converting.
    """
    if value == 0:
        return "0"
    if value < 0:
        return "-" + _es_number(-value)
    _, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    digits = list(digit_tuple)
    while len(digits) > 1 and digits[-1] == 0:
        digits.pop()
        exponent += 1
    text = "".join(str(d) for d in digits)
    k = len(text)
    n = exponent + k  # value == 0.<text> * 10**n
    if k <= n <= 21:
        return text + "0" * (n - k)
    if 0 < n <= 21:
        return f"{text[:n]}.{text[n:]}"
    if -6 < n <= 0:
        return "0." + "0" * -n + text
    e = n - 1
    sign = "+" if e >= 0 else "-"
    mantissa = text if k == 1 else f"{text[0]}.{text[1:]}"
    return f"{mantissa}e{sign}{abs(e)}"


def _jcs_serialize_value(value: Any) -> str:
    """Serialise a single JSON value per RFC 8785 (JCS).

    * Strings: minimal UTF-8 encoding, mandatory escapes only.
    * Numbers: floats in the ECMAScript Number-to-String form (shortest
      round-tripping digits); Python ints verbatim.
    * Booleans / null: lowercase literals.
    * Objects: keys sorted by code point.
    * Arrays (lists and tuples): elements in order.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            msg = "NaN and Infinity are not valid JSON values"
            raise ValueError(msg)
        return _es_number(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, (list, tuple)):
        elements = ",".join(_jcs_serialize_value(v) for v in value)
        return f"[{elements}]"
    if isinstance(value, dict):
        for key in value:
            if not isinstance(key, str):
                msg = f"JSON object keys must be str, got {type(key).__name__}"
                raise TypeError(msg)
        pairs = ",".join(
            f"{json.dumps(k, ensure_ascii=False)}:{_jcs_serialize_value(value[k])}"
            for k in sorted(value)
        )
        return "{" + pairs + "}"
    msg = f"Unsupported type for JCS serialisation: {type(value)}"
    raise TypeError(msg)


def canonical_json(value: Any) -> str:
    """Return the RFC 8785 canonical JSON text for *value*.

    Raises
    ------
    ValueError
        For NaN or infinite floats.
    TypeError
        For values with no JSON representation.
    """
    return _jcs_serialize_value(value)


# ---------------------------------------------------------------------------
# Chain inputs
# ---------------------------------------------------------------------------

def encode_identifier(identifier: Identifier) -> bytes:
    """Return the root-link message for *identifier*."""
    if isinstance(identifier, str):
        try:
            return identifier.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise EncodingFailure(
                f"Identifier is not valid Unicode text: {exc}",
                details={"identifier_type": "str"},
            ) from exc
    if isinstance(identifier, (bytes, bytearray)):
        return bytes(identifier)
    raise EncodingFailure(
        f"Identifier must be str or bytes, got {type(identifier).__name__}",
        details={"identifier_type": type(identifier).__name__},
    )


def encode_caveat(caveat: Encodable) -> bytes:
    """Call ``caveat.encode()`` and check that it produced bytes.

    Raises
    ------
    EncodingFailure
        If the caveat has no ``encode`` method, if it raises, or if it
        returns anything other than ``bytes``.  The original exception is
        chained.
    """
    caveat_type = type(caveat).__name__
    encode = getattr(caveat, "encode", None)
    if not callable(encode):
        raise EncodingFailure(
            f"{caveat_type} does not implement encode()",
            details={"caveat_type": caveat_type},
        )
    try:
        encoded = encode()
    except EncodingFailure:
        raise
    except Exception as exc:
        raise EncodingFailure(
            f"{caveat_type}.encode() failed: {exc}",
            details={"caveat_type": caveat_type},
        ) from exc
    if isinstance(encoded, bytearray):
        encoded = bytes(encoded)
    if not isinstance(encoded, bytes):
        raise EncodingFailure(
            f"{caveat_type}.encode() returned {type(encoded).__name__}, expected bytes",
            details={"caveat_type": caveat_type},
        )
    return encoded
