"""Root key handling.

Root keys are the only secret in the scheme.  This module provides:

* :func:`wipe` -- best-effort zeroing of a ``bytearray`` in place.
* :class:`SecretKey` -- a redacted, wipeable key container.
* :func:`key_bytes` -- validation and normalisation of the key forms the
  public API accepts.

**Python limitation:** ``bytes`` and ``str`` objects are immutable and the
garbage collector may copy them, so there is no way to guarantee that every
copy of a key is zeroed.  Callers who care should hold keys in a
:class:`SecretKey` and wipe it as soon as the key is no longer needed::

    with SecretKey(load_root_key()) as key:
        token = Macaroon.new(key, "user-42")
    # key buffer has been zeroed
"""
from __future__ import annotations

import ctypes
import logging

from macaroon_chain.core.errors import InvalidKey

logger = logging.getLogger(__name__)

_REDACTED = "[REDACTED]"


def wipe(data: bytearray) -> None:
    """Overwrite *data* with zeros in-place.

    Uses ``ctypes.memset`` on the underlying buffer so the write cannot be
    optimised away.

    Raises
    ------
    TypeError
        If *data* is not a ``bytearray``.
    """
    if not isinstance(data, bytearray):
        raise TypeError(f"Expected bytearray, got {type(data).__name__}")
    if len(data) == 0:
        return
    buf = (ctypes.c_char * len(data)).from_buffer(data)
    ctypes.memset(ctypes.addressof(buf), 0, len(data))


class SecretKey:
    """A root key that is never rendered by ``str()``, ``repr()`` or logging.

    The key material lives in a private ``bytearray`` so that :meth:`wipe`
    can zero it.  A wiped key is rejected by every operation that needs a
    key.  Instances are context managers that wipe on exit.
    """

    __slots__ = ("_data", "_wiped")

    def __init__(self, value: bytes | bytearray | str) -> None:
        if isinstance(value, str):
            value = value.encode("utf-8")
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError(f"SecretKey requires bytes or str, got {type(value).__name__}")
        self._data = bytearray(value)
        self._wiped = False

    def expose(self) -> bytes:
        """Return a copy of the key bytes.

        Raises
        ------
        InvalidKey
            If the key has already been wiped.
        """
        if self._wiped:
            raise InvalidKey("Root key has been wiped")
        return bytes(self._data)

    def wipe(self) -> None:
        """Zero the key buffer.  Safe to call more than once."""
        if not self._wiped:
            wipe(self._data)
            self._wiped = True

    @property
    def wiped(self) -> bool:
        """Return ``True`` once the buffer has been wiped."""
        return self._wiped

    def __enter__(self) -> SecretKey:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.wipe()

    def __len__(self) -> int:
        return len(self._data)

    def __str__(self) -> str:
        return _REDACTED

    def __repr__(self) -> str:
        return f"SecretKey({_REDACTED})"

    def __format__(self, format_spec: str) -> str:
        return _REDACTED


RootKey = bytes | bytearray | str | SecretKey
"""Every form in which a root key may be passed to the public API."""


def key_bytes(key: RootKey, *, min_length: int = 1) -> bytes:
    """Normalise *key* to ``bytes`` and enforce the length precondition.

    ``str`` keys are UTF-8 encoded.

    Raises
    ------
    InvalidKey
        If *key* has an unsupported type, has been wiped, or is shorter
        than *min_length* bytes.
    """
    if isinstance(key, SecretKey):
        raw = key.expose()
    elif isinstance(key, str):
        raw = key.encode("utf-8")
    elif isinstance(key, (bytes, bytearray, memoryview)):
        raw = bytes(key)
    else:
        raise InvalidKey(
            f"Root key must be bytes or str, got {type(key).__name__}",
            details={"key_type": type(key).__name__},
        )
    if len(raw) < min_length:
        logger.debug("Rejected root key shorter than %d bytes", min_length)
        raise InvalidKey(
            "Root key is empty" if not raw else "Root key is too short",
            details={"min_length": min_length},
        )
    return raw
