"""Expiration payoff curve and breakeven detection.

The curve is the value of the strategy if held to expiration: intrinsic
value minus premium, per leg, times the contract multiplier. It carries
no time value and no volatility term.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from .core import (
    CALL,
    CONTRACT_MULTIPLIER,
    Contract,
    PayoffPoint,
    PriceRange,
    signed_weight,
)

__all__ = [
    "intrinsic_value",
    "contract_payoff",
    "payoff_curve",
    "find_breakevens",
    "TailExposure",
    "tail_exposure",
]

BREAKEVEN_DECIMALS = 2


# ---------------------------------------------------------------------------
# Per-contract payoff
# ---------------------------------------------------------------------------
def intrinsic_value(contract: Contract, price):
    """Exercise value at ``price`` (scalar or array)."""
    price = np.asarray(price, dtype=float)
    if contract.kind == CALL:
        out = np.maximum(price - contract.strike, 0.0)
    else:
        out = np.maximum(contract.strike - price, 0.0)
    return float(out) if out.ndim == 0 else out


def contract_payoff(contract: Contract, price):
    """Profit of one leg at expiration, in currency.

    ``(intrinsic - premium) * signed_weight * multiplier``; a short leg
    therefore earns the premium and pays the intrinsic value.
    """
    intrinsic = intrinsic_value(contract, price)
    return (intrinsic - contract.premium) * signed_weight(contract) * CONTRACT_MULTIPLIER


# ---------------------------------------------------------------------------
# Curve
# ---------------------------------------------------------------------------
def payoff_curve(
    contracts: Iterable[Contract],
    price_range: PriceRange,
) -> tuple[PayoffPoint, ...]:
    """Sample total strategy profit over ``price_range``.

    Returns ``price_range.steps + 1`` points in ascending price order.
    An empty contract list gives an empty curve.
    """
    contracts = tuple(contracts)
    if not contracts:
        return ()

    i = np.arange(price_range.steps + 1, dtype=float)
    prices = price_range.min + i * price_range.step
    total = np.zeros_like(prices)
    for c in contracts:
        total = total + contract_payoff(c, prices)

    return tuple(
        PayoffPoint(price=float(p), profit=float(v)) for p, v in zip(prices, total)
    )


# ---------------------------------------------------------------------------
# Breakevens
# ---------------------------------------------------------------------------
def find_breakevens(curve: Sequence[PayoffPoint]) -> tuple[float, ...]:
    """Interpolated zero crossings of a sampled curve, ascending.

    A crossing is counted when profit moves from ``<= 0`` to ``> 0`` or from
    ``> 0`` to ``<= 0`` between consecutive samples. Two crossings inside
    the same sampling interval cancel out and are not reported; a finer
    grid is the only way to resolve them.
    """
    out = []
    for prev, curr in zip(curve, curve[1:]):
        if (prev.profit <= 0 < curr.profit) or (prev.profit > 0 >= curr.profit):
            a, b = abs(prev.profit), abs(curr.profit)
            ratio = a / (a + b)
            be = prev.price + ratio * (curr.price - prev.price)
            out.append(round(be, BREAKEVEN_DECIMALS))
    return tuple(out)


# ---------------------------------------------------------------------------
# Behaviour beyond the sampled window
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class TailExposure:
    """Whether profit or loss keeps growing as the underlying rises.

    ``slope`` is the currency P&L per unit of underlying above the highest
    strike. Below the lowest strike the payoff is always bounded because
    the underlying cannot fall below zero.
    """
    slope: float
    unbounded_profit: bool
    unbounded_loss: bool


def tail_exposure(contracts: Iterable[Contract]) -> TailExposure:
    slope = float(sum(
        signed_weight(c) * CONTRACT_MULTIPLIER for c in contracts if c.kind == CALL
    ))
    return TailExposure(
        slope=slope,
        unbounded_profit=slope > 0,
        unbounded_loss=slope < 0,
    )
