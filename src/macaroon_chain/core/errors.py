"""macaroon-chain error hierarchy.

Every failure the library can report is a concrete exception class with a
stable error code, so callers can log full diagnostics internally while
returning a redacted body to untrusted clients.

Hierarchy
---------
::

    MacaroonError              (MC-E000)
    +-- InvalidKey             (MC-E100)
    +-- VerificationError      (MC-E2xx)
    |   +-- SignatureMismatch  (MC-E200)
    |   +-- CaveatRejected     (MC-E201)
    +-- EncodingFailure        (MC-E300)

Usage
-----
Catch by category::

    try:
        macaroon.verify(key, context)
    except VerificationError as exc:
        audit_log.info("rejected", extra=exc.to_dict())
        return exc.public_dict()

Errors are always raised to the direct caller of the failing operation;
nothing in the library retries or suppresses them.
"""
from __future__ import annotations

from typing import Any

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

_PUBLIC_REJECTION = "Token rejected"


class MacaroonError(Exception):
    """Base exception for all macaroon-chain errors.

    Attributes
    ----------
    code : str
        Error code, e.g. ``"MC-E200"``.
    http_status : int
        Recommended HTTP status code when relaying the error.
    message : str
        Human-readable description.  MUST NOT contain key or signature bytes.
    details : dict[str, Any]
        Machine-readable diagnostic context (for audit logs only).
    """

    code: str = "MC-E000"
    http_status: int = 500
    message: str = "Unknown macaroon error"

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.details: dict[str, Any] = details or {}
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialise the error with full diagnostic detail."""
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            payload["detail"] = self.details
        return {"error": payload}

    def public_dict(self) -> dict[str, Any]:
        """Serialise the error without diagnostic detail.

        Safe to hand to an untrusted client.
        """
        return {"error": {"code": self.code, "message": self.message}}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


# ===================================================================
# MC-E1xx  Key errors
# ===================================================================

class InvalidKey(MacaroonError):
    """MC-E100 -- The root key fails a validity precondition (e.g. empty)."""

    code = "MC-E100"
    http_status = 500
    message = "Root key is invalid"


# ===================================================================
# MC-E2xx  Verification errors
# ===================================================================

class VerificationError(MacaroonError):
    """MC-E2xx -- A presented macaroon was rejected."""

    code = "MC-E2XX"
    http_status = 401

    def public_dict(self) -> dict[str, Any]:
        """Return one generic body for every kind of rejection.

        A client must not learn whether the signature or a caveat failed,
        or which caveat it was.
        """
        return {"error": {"code": VerificationError.code, "message": _PUBLIC_REJECTION}}


class SignatureMismatch(VerificationError):
    """MC-E200 -- The replayed chain signature differs from the token's."""

    code = "MC-E200"
    message = "Macaroon signature is not valid"


class CaveatRejected(VerificationError):
    """MC-E201 -- A caveat predicate failed for the supplied context.

    Attributes
    ----------
    index : int
        Zero-based position of the failing caveat in the macaroon.
    cause : BaseException
        The exception raised by the caveat's ``verify`` method.
    """

    code = "MC-E201"
    http_status = 403
    message = "Macaroon caveat rejected the request"

    def __init__(
        self,
        index: int,
        cause: BaseException,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.index = index
        self.cause = cause
        merged = {"index": index, "cause": f"{type(cause).__name__}: {cause}"}
        if details:
            merged.update(details)
        super().__init__(
            f"Caveat {index} rejected the request: {cause}",
            details=merged,
        )

    def __repr__(self) -> str:
        return f"CaveatRejected(index={self.index!r}, cause={self.cause!r})"


# ===================================================================
# MC-E3xx  Encoding errors
# ===================================================================

class EncodingFailure(MacaroonError):
    """MC-E300 -- A caveat or token failed to encode or decode."""

    code = "MC-E300"
    http_status = 400
    message = "Macaroon could not be encoded or decoded"


# ---------------------------------------------------------------------------
# Lookup helper
# ---------------------------------------------------------------------------

_CODE_MAP: dict[str, type[MacaroonError]] = {
    cls.code: cls
    for cls in [
        InvalidKey,
        SignatureMismatch,
        EncodingFailure,
    ]
}


def error_from_code(code: str, message: str | None = None) -> MacaroonError:
    """Instantiate the exception class registered for *code*.

    ``MC-E201`` is not constructible this way because it needs the failing
    caveat's index and cause.

    Raises
    ------
    KeyError
        If *code* is not a recognised error code.
    """
    cls = _CODE_MAP[code]
    return cls(message) if message else cls()
