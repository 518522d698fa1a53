"""Portfolio Greeks, payoff-curve risk metrics, and position sizing.

Everything here is a pure function of immutable inputs. Greeks are summed
leg by leg with the signed quantity weight from :func:`optstrat.core.signed_weight`;
no cross-leg interaction is modelled.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from .black_scholes import GREEKS_DECIMALS, greeks as bs_greeks
from .core import Contract, Greeks, MarketParameters, PayoffPoint, RiskMetrics, signed_weight
from .errors import UNBOUNDED, InvalidInputError, Unbounded
from .payoff import TailExposure

__all__ = [
    "contract_greeks",
    "PortfolioGreeks",
    "portfolio_greeks",
    "risk_metrics",
    "position_size",
    "profit_factor",
    "kelly_percentage",
    "risk_utilization",
    "risk_level",
    "risk_warnings",
    "RiskAssessment",
    "assess_risk",
]

MONEY_DECIMALS = 2
PERCENT_DECIMALS = 1
RATIO_DECIMALS = 2

LOW_RISK_MAX = 50.0
MEDIUM_RISK_MAX = 80.0
SHORT_DATED_DAYS = 7
LOW_POP = 40.0


# ---------------------------------------------------------------------------
# Greeks
# ---------------------------------------------------------------------------

def contract_greeks(contract: Contract, market: MarketParameters) -> Greeks:
    """Unweighted Greeks of one unit of ``contract``."""
    return bs_greeks(
        market.spot, contract.strike, market.time, market.rate,
        market.volatility, contract.kind,
    )


@dataclass(frozen=True)
class PortfolioGreeks:
    """Signed, quantity-weighted Greeks per leg and their total.

    ``legs`` holds ``(contract_id, weighted_greeks)`` pairs in the order
    the contracts were given.
    """
    total: Greeks
    legs: tuple[tuple[str, Greeks], ...]

    def for_contract(self, contract_id: str) -> Greeks:
        for cid, g in self.legs:
            if cid == contract_id:
                return g
        raise KeyError(contract_id)


def portfolio_greeks(
    contracts: Iterable[Contract],
    market: MarketParameters,
) -> PortfolioGreeks:
    """Aggregate Greeks for a strategy.

    Parameters
    ----------
    contracts : iterable of Contract
        Strategy legs.
    market : MarketParameters
        Spot, rate, volatility and time shared by every leg.

    Returns
    -------
    PortfolioGreeks
        Per-leg weighted Greeks and the sum, rounded to 4 decimals.
    """
    total = Greeks.zero()
    legs = []
    for c in contracts:
        weighted = contract_greeks(c, market).scaled(signed_weight(c))
        total = total + weighted
        legs.append((c.id, weighted.rounded(GREEKS_DECIMALS)))
    return PortfolioGreeks(total=total.rounded(GREEKS_DECIMALS), legs=tuple(legs))


# ---------------------------------------------------------------------------
# Curve metrics
# ---------------------------------------------------------------------------

def risk_metrics(
    curve: Sequence[PayoffPoint],
    breakevens: Sequence[float],
) -> RiskMetrics:
    """Summarise a sampled payoff curve.

    ``max_profit``/``max_loss`` are the sampled extrema; a payoff that is
    unbounded in reality is reported at the window edge (see
    :func:`optstrat.payoff.tail_exposure`). ``probability_of_profit`` is
    the share of samples with positive profit, in percent. It is a grid
    density, not a lognormal probability.
    """
    if not curve:
        raise InvalidInputError("cannot compute risk metrics of an empty curve")

    profits = [p.profit for p in curve]
    max_profit = max(profits)
    max_loss = min(profits)
    winners = sum(1 for v in profits if v > 0)
    pop = winners / len(profits) * 100.0

    if max_loss != 0:
        rr: float | Unbounded = round(abs(max_profit / max_loss), RATIO_DECIMALS)
    else:
        rr = UNBOUNDED

    return RiskMetrics(
        max_profit=round(max_profit, MONEY_DECIMALS),
        max_loss=round(max_loss, MONEY_DECIMALS),
        breakevens=tuple(breakevens),
        probability_of_profit=round(pop, PERCENT_DECIMALS),
        risk_reward_ratio=rr,
    )


# ---------------------------------------------------------------------------
# Sizing
# ---------------------------------------------------------------------------

def _check_budget(account_size: float, risk_pct: float) -> None:
    if not math.isfinite(account_size) or account_size < 0:
        raise InvalidInputError(f"account_size must be non-negative, got {account_size}")
    if not math.isfinite(risk_pct) or not 0 <= risk_pct <= 100:
        raise InvalidInputError(f"risk_pct must be in [0, 100], got {risk_pct}")


def position_size(account_size: float, risk_pct: float, max_loss: float) -> int:
    """Recommended contract count for a risk budget.

    ``floor(account_size * risk_pct / 100 / |max_loss|)``, floored at one
    contract whenever there is any loss exposure, even if the budget does
    not cover a single contract's worst case. Returns 0 when
    ``max_loss >= 0``.
    """
    _check_budget(account_size, risk_pct)
    if not math.isfinite(max_loss):
        raise InvalidInputError(f"max_loss must be finite, got {max_loss}")
    if max_loss >= 0:
        return 0

    budget = account_size * risk_pct / 100.0
    raw = math.floor(budget / abs(max_loss))
    return max(int(raw), 1)


# ---------------------------------------------------------------------------
# Derived ratios
# ---------------------------------------------------------------------------

def profit_factor(max_profit: float, max_loss: float) -> float | Unbounded:
    """``max_profit / |max_loss|``, or ``UNBOUNDED`` when there is no loss."""
    if max_loss == 0:
        return UNBOUNDED
    return max_profit / abs(max_loss)


def kelly_percentage(
    probability_of_profit: float,
    risk_reward_ratio: float | Unbounded,
) -> float:
    """Kelly fraction in percent, 0 when the win rate is 50% or less.

    An unbounded reward/risk ratio contributes nothing to the loss term,
    so the result collapses to the win rate itself.
    """
    if probability_of_profit <= 50:
        return 0.0
    p = probability_of_profit / 100.0
    if risk_reward_ratio is UNBOUNDED:
        return p * 100.0
    if risk_reward_ratio == 0:
        return 0.0
    return (p - (1.0 - p) / risk_reward_ratio) * 100.0


def risk_utilization(
    max_loss: float, account_size: float, risk_pct: float,
) -> float | Unbounded:
    """Worst sampled loss as a percentage of the risk budget."""
    _check_budget(account_size, risk_pct)
    current = abs(max_loss)
    if current == 0:
        return 0.0
    budget = account_size * risk_pct / 100.0
    if budget == 0:
        return UNBOUNDED
    return current / budget * 100.0


def risk_level(utilization: float | Unbounded) -> str:
    if utilization is UNBOUNDED or utilization > MEDIUM_RISK_MAX:
        return "high"
    if utilization > LOW_RISK_MAX:
        return "medium"
    return "low"


def risk_warnings(
    metrics: RiskMetrics,
    utilization: float | Unbounded,
    days_to_expiration: float,
    tail: TailExposure | None = None,
) -> tuple[str, ...]:
    out = []
    if utilization is UNBOUNDED or utilization > 100:
        out.append("Position exceeds risk tolerance")
    if tail is not None and tail.unbounded_loss:
        out.append("Unlimited loss potential")
    if days_to_expiration < SHORT_DATED_DAYS:
        out.append("High time decay risk")
    if metrics.probability_of_profit < LOW_POP:
        out.append("Low probability of profit")
    return tuple(out)


@dataclass(frozen=True)
class RiskAssessment:
    """Budget usage and warnings for one strategy at one account size."""
    max_risk_amount: float
    current_risk: float
    utilization: float | Unbounded
    level: str
    kelly: float
    profit_factor: float | Unbounded
    warnings: tuple[str, ...]
    balanced: bool


def assess_risk(
    metrics: RiskMetrics,
    account_size: float,
    risk_pct: float,
    days_to_expiration: float,
    tail: TailExposure | None = None,
) -> RiskAssessment:
    util = risk_utilization(metrics.max_loss, account_size, risk_pct)
    level = risk_level(util)
    balanced = (
        level == "low"
        and metrics.probability_of_profit >= 50
        and days_to_expiration >= SHORT_DATED_DAYS
    )
    return RiskAssessment(
        max_risk_amount=account_size * risk_pct / 100.0,
        current_risk=abs(metrics.max_loss),
        utilization=util,
        level=level,
        kelly=kelly_percentage(metrics.probability_of_profit, metrics.risk_reward_ratio),
        profit_factor=profit_factor(metrics.max_profit, metrics.max_loss),
        warnings=risk_warnings(metrics, util, days_to_expiration, tail),
        balanced=balanced,
    )
