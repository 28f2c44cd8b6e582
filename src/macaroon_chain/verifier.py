"""Macaroon verification.

Verification is a single deterministic pass:

1. **Chain replay** -- recompute the signature from the candidate root key,
   the identifier and every caveat in stored order.
2. **Signature check** -- compare with the presented signature in constant
   time.  A mismatch fails immediately; no caveat predicate runs, so a
   forged token learns nothing about which caveats would have passed.
3. **Predicate evaluation** -- call ``verify(context)`` on every caveat in
   order.  A caveat passes by returning anything but ``False``; raising or
   returning ``False`` rejects.  The first failure is reported with its
   index.

:func:`verify_macaroon` raises on rejection.  :func:`check_macaroon` returns
a :class:`VerificationResult` instead, convenient for audit logging.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from macaroon_chain.chain.engine import replay_chain, signatures_match
from macaroon_chain.core.config import DEFAULT_CONFIG, MacaroonConfig
from macaroon_chain.core.errors import (
    CaveatRejected,
    EncodingFailure,
    MacaroonError,
    SignatureMismatch,
)
from macaroon_chain.core.keys import RootKey

if TYPE_CHECKING:
    from macaroon_chain.macaroon import Macaroon

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class VerificationResult:
    """Outcome of :func:`check_macaroon`.

    Attributes
    ----------
    valid:
        ``True`` if the signature matched and every caveat passed.
    error:
        The error that caused rejection, or ``None`` on success.
    caveats_passed:
        Number of caveat predicates that passed before the decision.
    """

    valid: bool
    error: MacaroonError | None = None
    caveats_passed: int = 0

    def public_dict(self) -> dict[str, Any]:
        """Return a body safe for untrusted clients."""
        if self.error is None:
            return {"valid": True}
        return {"valid": False, **self.error.public_dict()}


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------

def verify_macaroon(
    macaroon: Macaroon[Any],
    key: RootKey,
    context: Any,
    *,
    config: MacaroonConfig | None = None,
) -> None:
    """Accept or reject *macaroon* for *context*.

    Parameters
    ----------
    macaroon:
        The presented token.
    key:
        Candidate root key.
    context:
        Application value handed to every caveat's ``verify``.
    config:
        Defaults to :data:`~macaroon_chain.core.config.DEFAULT_CONFIG`.

    Raises
    ------
    InvalidKey
        If *key* fails the key precondition.
    EncodingFailure
        If the token carries more than ``config.max_caveats`` caveats or a
        caveat cannot be encoded.
    SignatureMismatch
        If the replayed signature differs from the token's.
    CaveatRejected
        If a caveat predicate raises or returns ``False``; ``index`` names
        the first failure.
    """
    cfg = config or DEFAULT_CONFIG
    caveats = macaroon.caveats
    if len(caveats) > cfg.max_caveats:
        raise EncodingFailure(
            f"Macaroon carries {len(caveats)} caveats; at most {cfg.max_caveats} accepted",
            details={"caveat_count": len(caveats), "max_caveats": cfg.max_caveats},
        )

    expected = replay_chain(
        key,
        macaroon.identifier,
        caveats,
        macaroon.algorithm,
        min_key_length=cfg.min_key_length,
    )
    if not signatures_match(expected, macaroon.signature):
        logger.info("Macaroon %r rejected: signature mismatch", macaroon.identifier)
        raise SignatureMismatch(details={"caveat_count": len(caveats)})

    for index, caveat in enumerate(caveats):
        check = getattr(caveat, "verify", None)
        if not callable(check):
            cause = TypeError(f"{type(caveat).__name__} does not implement verify()")
            logger.info("Macaroon %r rejected: caveat %d has no predicate", macaroon.identifier, index)
            raise CaveatRejected(index, cause) from cause
        try:
            outcome = check(context)
            if outcome is False:
                raise ValueError(f"{type(caveat).__name__}.verify() returned False")
        except Exception as exc:
            logger.info(
                "Macaroon %r rejected: caveat %d (%s) failed",
                macaroon.identifier,
                index,
                type(caveat).__name__,
            )
            raise CaveatRejected(
                index,
                exc,
                details={"caveat_type": type(caveat).__name__},
            ) from exc

    logger.debug("Macaroon %r verified with %d caveats", macaroon.identifier, len(caveats))


def check_macaroon(
    macaroon: Macaroon[Any],
    key: RootKey,
    context: Any,
    *,
    config: MacaroonConfig | None = None,
) -> VerificationResult:
    """Non-raising form of :func:`verify_macaroon`.

    Every :class:`~macaroon_chain.core.errors.MacaroonError` is captured in
    the result; any other exception propagates.
    """
    try:
        verify_macaroon(macaroon, key, context, config=config)
    except CaveatRejected as exc:
        return VerificationResult(valid=False, error=exc, caveats_passed=exc.index)
    except MacaroonError as exc:
        return VerificationResult(valid=False, error=exc)
    return VerificationResult(valid=True, caveats_passed=len(macaroon.caveats))


# ---------------------------------------------------------------------------
# Verifier
# ---------------------------------------------------------------------------

class Verifier:
    """Configured verification entry point.

    Holds only its immutable :class:`MacaroonConfig`; never keys, tokens or
    results, so one instance can serve every thread.
    """

    __slots__ = ("_config",)

    def __init__(self, config: MacaroonConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG

    @property
    def config(self) -> MacaroonConfig:
        return self._config

    def verify(self, macaroon: Macaroon[Any], key: RootKey, context: Any) -> None:
        """See :func:`verify_macaroon`."""
        verify_macaroon(macaroon, key, context, config=self._config)

    def check(self, macaroon: Macaroon[Any], key: RootKey, context: Any) -> VerificationResult:
        """See :func:`check_macaroon`."""
        return check_macaroon(macaroon, key, context, config=self._config)
