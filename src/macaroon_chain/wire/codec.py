"""JSON token codec.

A macaroon travels as a three-element JSON array::

    ["<identifier>", [<caveat>, ...], "<base64url signature>"]

* The identifier is a JSON string.
* Each caveat is the JSON value produced by the codec's caveat adapter, in
  chain order.
* The signature is base64url with padding, transmitted verbatim.

The MAC algorithm is not on the wire; it is fixed when the codec is built,
and decoded signatures must have that algorithm's digest size.  Decoded
tokens are untrusted until verified.
"""
from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from macaroon_chain.chain.algorithms import resolve_algorithm
from macaroon_chain.core.config import DEFAULT_CONFIG, MacaroonConfig
from macaroon_chain.core.errors import EncodingFailure
from macaroon_chain.core.interfaces import Encodable, MacAlgorithm
from macaroon_chain.macaroon import Macaroon

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=Encodable)


def encode_signature(signature: bytes) -> str:
    """Return *signature* as padded base64url text."""
    return base64.urlsafe_b64encode(signature).decode("ascii")


def decode_signature(text: str) -> bytes:
    """Decode padded base64url text.

    Raises
    ------
    EncodingFailure
        If *text* is not valid base64url.
    """
    try:
        return base64.b64decode(text.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise EncodingFailure(f"Signature is not valid base64url: {exc}") from exc


class MacaroonCodec(Generic[C]):
    """Serialise macaroons whose caveats a Pydantic adapter understands.

    Parameters
    ----------
    caveat_adapter:
        Adapter for the caveat type, e.g.
        :data:`~macaroon_chain.caveats.STANDARD_CAVEATS` or
        ``TypeAdapter(OpaqueCaveat)``.
    algorithm:
        MAC algorithm of decoded tokens; overrides ``config.algorithm``.
    config:
        Size limits.  Defaults to
        :data:`~macaroon_chain.core.config.DEFAULT_CONFIG`.
    """

    __slots__ = ("_adapter", "_algorithm", "_config")

    def __init__(
        self,
        caveat_adapter: TypeAdapter[C],
        *,
        algorithm: str | MacAlgorithm | None = None,
        config: MacaroonConfig | None = None,
    ) -> None:
        self._config = config or DEFAULT_CONFIG
        self._adapter = caveat_adapter
        self._algorithm = resolve_algorithm(
            algorithm if algorithm is not None else self._config.algorithm
        )

    @property
    def algorithm(self) -> MacAlgorithm:
        return self._algorithm

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def to_jsonable(self, macaroon: Macaroon[C]) -> list[Any]:
        """Return the wire array for *macaroon* as plain Python values.

        Raises
        ------
        EncodingFailure
            If the identifier is not a ``str``, the token uses a different
            algorithm from this codec, or a caveat cannot be dumped.
        """
        if not isinstance(macaroon.identifier, str):
            raise EncodingFailure(
                "JSON tokens need a str identifier",
                details={"identifier_type": type(macaroon.identifier).__name__},
            )
        if macaroon.algorithm.name != self._algorithm.name:
            raise EncodingFailure(
                f"Token uses {macaroon.algorithm.name}; codec expects {self._algorithm.name}",
                details={"algorithm": macaroon.algorithm.name},
            )
        caveats: list[Any] = []
        for index, caveat in enumerate(macaroon.caveats):
            try:
                caveats.append(self._adapter.dump_python(caveat, mode="json"))
            except ValueError as exc:
                raise EncodingFailure(
                    f"Caveat {index} could not be serialised: {exc}",
                    details={"index": index},
                ) from exc
        return [macaroon.identifier, caveats, encode_signature(macaroon.signature)]

    def dumps(self, macaroon: Macaroon[C]) -> str:
        """Serialise *macaroon* to compact JSON text."""
        return json.dumps(self.to_jsonable(macaroon), ensure_ascii=False, separators=(",", ":"))

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def from_jsonable(self, value: Any) -> Macaroon[C]:
        """Rebuild a macaroon from a decoded wire array.

        Raises
        ------
        EncodingFailure
            If *value* does not have the wire shape, carries too many
            caveats, a caveat fails validation, or the signature is
            malformed.
        """
        if not isinstance(value, (list, tuple)) or len(value) != 3:
            raise EncodingFailure("Token must be a 3-element array")
        identifier, raw_caveats, raw_signature = value
        if not isinstance(identifier, str):
            raise EncodingFailure("Token identifier must be a string")
        if not isinstance(raw_caveats, list):
            raise EncodingFailure("Token caveats must be an array")
        if not isinstance(raw_signature, str):
            raise EncodingFailure("Token signature must be a string")
        if len(raw_caveats) > self._config.max_caveats:
            raise EncodingFailure(
                f"Token carries {len(raw_caveats)} caveats; "
                f"at most {self._config.max_caveats} accepted",
                details={"caveat_count": len(raw_caveats)},
            )

        caveats: list[C] = []
        for index, raw in enumerate(raw_caveats):
            try:
                caveats.append(self._adapter.validate_python(raw))
            except ValidationError as exc:
                raise EncodingFailure(
                    f"Caveat {index} failed validation: {exc}",
                    details={"index": index},
                ) from exc

        signature = decode_signature(raw_signature)
        return Macaroon(identifier, caveats, signature, algorithm=self._algorithm)

    def loads(self, data: str | bytes) -> Macaroon[C]:
        """Parse JSON text produced by :meth:`dumps`.

        Raises
        ------
        EncodingFailure
            If *data* exceeds ``config.max_token_bytes``, is not valid
            UTF-8 JSON, or fails :meth:`from_jsonable`.
        """
        try:
            size = len(data) if isinstance(data, bytes) else len(data.encode("utf-8"))
        except UnicodeEncodeError as exc:
            raise EncodingFailure(f"Token is not valid Unicode text: {exc}") from exc
        if size > self._config.max_token_bytes:
            raise EncodingFailure(
                f"Token is {size} bytes; at most {self._config.max_token_bytes} accepted",
                details={"size": size},
            )
        # ValueError covers JSONDecodeError and the int digit limit.
        try:
            value = json.loads(data)
        except (ValueError, RecursionError, UnicodeError) as exc:
            raise EncodingFailure(f"Invalid JSON: {exc}") from exc
        macaroon = self.from_jsonable(value)
        logger.debug("Decoded macaroon %r with %d caveats", macaroon.identifier, len(macaroon.caveats))
        return macaroon
