"""Immutable strategy snapshots and the full recompute entry point."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace

from .core import Contract, Greeks, MarketParameters, PayoffPoint, PriceRange, RiskMetrics
from .errors import InvalidInputError
from .payoff import TailExposure, find_breakevens, payoff_curve, tail_exposure
from .risk import (
    PortfolioGreeks,
    RiskAssessment,
    assess_risk,
    portfolio_greeks,
    position_size,
    risk_metrics,
)

__all__ = ["Strategy", "StrategyAnalysis", "analyze", "next_contract_id"]

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNT_SIZE = 10_000.0
DEFAULT_RISK_PCT = 2.0

_ID_RE = re.compile(r"^contract-(\d+)$")


# ---------------------------------------------------------------------------
# Contract collection
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Strategy:
    """A named set of legs plus the market they are priced against.

    Every mutator returns a new ``Strategy``; the original is untouched.
    """
    market: MarketParameters
    contracts: tuple[Contract, ...] = ()
    name: str = "Custom Strategy"
    description: str = ""

    def __post_init__(self):
        object.__setattr__(self, "contracts", tuple(self.contracts))
        ids = [c.id for c in self.contracts]
        if len(set(ids)) != len(ids):
            raise InvalidInputError(f"duplicate contract ids in {ids}")

    def __len__(self) -> int:
        return len(self.contracts)

    def get(self, contract_id: str) -> Contract:
        for c in self.contracts:
            if c.id == contract_id:
                return c
        raise KeyError(contract_id)

    def add_contract(self, contract: Contract) -> Strategy:
        if any(c.id == contract.id for c in self.contracts):
            raise InvalidInputError(f"contract id {contract.id!r} already exists")
        return replace(self, contracts=self.contracts + (contract,))

    def remove_contract(self, contract_id: str) -> Strategy:
        self.get(contract_id)
        return replace(
            self, contracts=tuple(c for c in self.contracts if c.id != contract_id)
        )

    def replace_contract(self, contract: Contract) -> Strategy:
        """Swap the leg with the same id, keeping its position in the list."""
        self.get(contract.id)
        return replace(
            self,
            contracts=tuple(contract if c.id == contract.id else c for c in self.contracts),
        )

    def with_market(self, market: MarketParameters) -> Strategy:
        return replace(self, market=market)

    def with_spot(self, spot: float) -> Strategy:
        """Re-centre on a new underlying price, e.g. ``quote.price``."""
        return replace(self, market=replace(self.market, spot=spot))


def next_contract_id(strategy: Strategy) -> str:
    """First free ``contract-<n>`` id for ``strategy``."""
    used = [int(m.group(1)) for c in strategy.contracts if (m := _ID_RE.match(c.id))]
    return f"contract-{max(used, default=-1) + 1}"


# ---------------------------------------------------------------------------
# Recompute
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class StrategyAnalysis:
    """Everything the dashboard shows for one snapshot."""
    price_range: PriceRange
    curve: tuple[PayoffPoint, ...]
    breakevens: tuple[float, ...]
    metrics: RiskMetrics | None
    greeks: PortfolioGreeks | None
    tail: TailExposure
    position_size: int
    assessment: RiskAssessment | None = field(default=None)

    @property
    def total_greeks(self) -> Greeks:
        return self.greeks.total if self.greeks is not None else Greeks.zero()


def analyze(
    strategy: Strategy,
    *,
    account_size: float = DEFAULT_ACCOUNT_SIZE,
    risk_pct: float = DEFAULT_RISK_PCT,
    price_range: PriceRange | None = None,
) -> StrategyAnalysis:
    """Recompute the Greeks view and the risk view from scratch.

    ``price_range`` defaults to +/-30% around spot with 101 samples.
    """
    market = strategy.market
    if price_range is None:
        price_range = PriceRange.around(market.spot)
    tail = tail_exposure(strategy.contracts)

    if not strategy.contracts:
        logger.debug("analyze: %r has no contracts", strategy.name)
        return StrategyAnalysis(
            price_range=price_range, curve=(), breakevens=(), metrics=None,
            greeks=None, tail=tail, position_size=0,
        )

    curve = payoff_curve(strategy.contracts, price_range)
    breakevens = find_breakevens(curve)
    metrics = risk_metrics(curve, breakevens)
    greeks = portfolio_greeks(strategy.contracts, market)
    size = position_size(account_size, risk_pct, metrics.max_loss)
    assessment = assess_risk(metrics, account_size, risk_pct, market.days, tail)

    logger.debug(
        "analyze: %r legs=%d breakevens=%s max_loss=%.2f size=%d",
        strategy.name, len(strategy), breakevens, metrics.max_loss, size,
    )
    return StrategyAnalysis(
        price_range=price_range,
        curve=curve,
        breakevens=breakevens,
        metrics=metrics,
        greeks=greeks,
        tail=tail,
        position_size=size,
        assessment=assessment,
    )
