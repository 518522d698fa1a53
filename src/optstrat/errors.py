"""Error taxonomy shared by the pricing and risk modules."""

from __future__ import annotations

from enum import Enum

__all__ = ["InvalidInputError", "Unbounded", "UNBOUNDED", "is_unbounded"]


class InvalidInputError(ValueError):
    """Raised when an input would make the model undefined.

    Non-positive spot or strike, non-positive volatility, negative time,
    non-positive quantity, non-finite numbers.
    """


class Unbounded(Enum):
    """Tag for a ratio whose denominator is zero.

    Used instead of ``float("inf")`` so that accidental arithmetic on the
    value raises ``TypeError`` rather than propagating silently.
    """

    UNBOUNDED = "unbounded"

    def __str__(self) -> str:
        return "unbounded"


UNBOUNDED = Unbounded.UNBOUNDED


def is_unbounded(value) -> bool:
    return value is UNBOUNDED
