from __future__ import annotations

import math
from dataclasses import dataclass

from .errors import InvalidInputError, Unbounded

CALL = "call"
PUT = "put"
LONG = "long"
SHORT = "short"

# one listed equity option contract covers 100 shares
CONTRACT_MULTIPLIER = 100

DAYS_PER_YEAR = 365.0
DEFAULT_STEPS = 100
DEFAULT_WIDTH = 0.3


def _require_finite(name: str, value: float) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"{name} must be a real number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidInputError(f"{name} must be finite, got {value}")


# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Contract:
    """One option leg of a strategy.

    Parameters
    ----------
    id : str
        Stable key inside the owning strategy.
    kind : str
        ``"call"`` or ``"put"``.
    strike : float
        Exercise price, must be positive.
    premium : float
        Per-share price paid (long) or received (short), ``>= 0``.
    quantity : int
        Number of contracts, ``>= 1``.
    position : str
        ``"long"`` or ``"short"``.
    expiration : str
        ISO expiration date, informational only.
    underlying : str
        Underlying symbol.
    """
    id: str
    kind: str
    strike: float
    premium: float
    quantity: int = 1
    position: str = LONG
    expiration: str = ""
    underlying: str = ""

    def __post_init__(self):
        if self.kind not in (CALL, PUT):
            raise InvalidInputError(f"kind must be 'call' or 'put', got {self.kind!r}")
        if self.position not in (LONG, SHORT):
            raise InvalidInputError(
                f"position must be 'long' or 'short', got {self.position!r}"
            )
        _require_finite("strike", self.strike)
        _require_finite("premium", self.premium)
        if self.strike <= 0:
            raise InvalidInputError(f"strike must be positive, got {self.strike}")
        if self.premium < 0:
            raise InvalidInputError(f"premium must be non-negative, got {self.premium}")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise InvalidInputError(f"quantity must be an integer, got {self.quantity!r}")
        if self.quantity < 1:
            raise InvalidInputError(f"quantity must be >= 1, got {self.quantity}")


def signed_weight(contract: Contract) -> int:
    """``+quantity`` for a long leg, ``-quantity`` for a short one."""
    return contract.quantity if contract.position == LONG else -contract.quantity


# ---------------------------------------------------------------------------
# Market inputs shared by every leg
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class MarketParameters:
    """Spot, rate, volatility and time shared across one strategy.

    Parameters
    ----------
    spot : float
        Underlying price, positive.
    rate : float
        Annualised risk-free rate as a fraction (0.05 = 5%).
    volatility : float
        Annualised volatility as a fraction, positive.
    time : float
        Time to expiration in years, ``>= 0``.
    """
    spot: float
    rate: float
    volatility: float
    time: float

    def __post_init__(self):
        for name in ("spot", "rate", "volatility", "time"):
            _require_finite(name, getattr(self, name))
        if self.spot <= 0:
            raise InvalidInputError(f"spot must be positive, got {self.spot}")
        if self.volatility <= 0:
            raise InvalidInputError(f"volatility must be positive, got {self.volatility}")
        if self.time < 0:
            raise InvalidInputError(f"time must be non-negative, got {self.time}")

    @classmethod
    def from_dashboard(
        cls, spot: float, rate_pct: float, vol_pct: float, days: float
    ) -> MarketParameters:
        """Build from percentage rate/vol and a calendar-day count."""
        return cls(
            spot=spot,
            rate=rate_pct / 100.0,
            volatility=vol_pct / 100.0,
            time=days / DAYS_PER_YEAR,
        )

    @property
    def days(self) -> float:
        return self.time * DAYS_PER_YEAR


@dataclass(frozen=True)
class PriceRange:
    """Sampling window for the expiration payoff curve.

    ``steps`` intervals give ``steps + 1`` sample points, both ends included.
    """
    min: float
    max: float
    steps: int = DEFAULT_STEPS

    def __post_init__(self):
        _require_finite("min", self.min)
        _require_finite("max", self.max)
        if self.min < 0:
            raise InvalidInputError(f"min must be non-negative, got {self.min}")
        if self.max <= self.min:
            raise InvalidInputError(
                f"max must exceed min, got min={self.min} max={self.max}"
            )
        if isinstance(self.steps, bool) or not isinstance(self.steps, int) or self.steps < 1:
            raise InvalidInputError(f"steps must be a positive integer, got {self.steps!r}")

    @classmethod
    def around(
        cls, center: float, width: float = DEFAULT_WIDTH, steps: int = DEFAULT_STEPS
    ) -> PriceRange:
        """``[center * (1 - width), center * (1 + width)]``."""
        _require_finite("center", center)
        if center <= 0:
            raise InvalidInputError(f"center must be positive, got {center}")
        if not 0 < width < 1:
            raise InvalidInputError(f"width must be in (0, 1), got {width}")
        return cls(min=center * (1.0 - width), max=center * (1.0 + width), steps=steps)

    @property
    def step(self) -> float:
        return (self.max - self.min) / self.steps


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Greeks:
    """Delta, gamma, theta (per day), vega and rho (per 1 point)."""
    delta: float
    gamma: float
    theta: float
    vega: float
    rho: float

    @classmethod
    def zero(cls) -> Greeks:
        return cls(0.0, 0.0, 0.0, 0.0, 0.0)

    def scaled(self, factor: float) -> Greeks:
        """Return Greeks scaled by a signed position weight."""
        return Greeks(
            delta=self.delta * factor,
            gamma=self.gamma * factor,
            theta=self.theta * factor,
            vega=self.vega * factor,
            rho=self.rho * factor,
        )

    def rounded(self, ndigits: int = 4) -> Greeks:
        return Greeks(
            delta=round(self.delta, ndigits),
            gamma=round(self.gamma, ndigits),
            theta=round(self.theta, ndigits),
            vega=round(self.vega, ndigits),
            rho=round(self.rho, ndigits),
        )

    def __add__(self, other: Greeks) -> Greeks:
        if not isinstance(other, Greeks):
            return NotImplemented
        return Greeks(
            delta=self.delta + other.delta,
            gamma=self.gamma + other.gamma,
            theta=self.theta + other.theta,
            vega=self.vega + other.vega,
            rho=self.rho + other.rho,
        )

    def as_dict(self) -> dict[str, float]:
        return {
            "delta": self.delta,
            "gamma": self.gamma,
            "theta": self.theta,
            "vega": self.vega,
            "rho": self.rho,
        }


@dataclass(frozen=True)
class PayoffPoint:
    """Strategy profit (currency, multiplier applied) at an expiration price."""
    price: float
    profit: float


@dataclass(frozen=True)
class RiskMetrics:
    """Risk summary derived from a sampled payoff curve.

    ``max_profit`` and ``max_loss`` are extrema over the sampled window,
    not asymptotic bounds. ``probability_of_profit`` is the percentage of
    samples with positive profit.
    """
    max_profit: float
    max_loss: float
    breakevens: tuple[float, ...]
    probability_of_profit: float
    risk_reward_ratio: float | Unbounded
