"""Built-in multi-leg strategy templates."""

from __future__ import annotations

from dataclasses import dataclass

from .core import CALL, LONG, PUT, SHORT, Contract, MarketParameters
from .strategy import Strategy

__all__ = ["Leg", "StrategyTemplate", "STRATEGY_TEMPLATES", "get_template",
           "strategy_from_template"]

DEFAULT_EXPIRATION = "2024-12-31"


@dataclass(frozen=True)
class Leg:
    kind: str
    strike: float
    premium: float
    quantity: int = 1
    position: str = LONG
    expiration: str = DEFAULT_EXPIRATION


@dataclass(frozen=True)
class StrategyTemplate:
    id: str
    name: str
    description: str
    category: str
    legs: tuple[Leg, ...]

    def contracts(self, underlying: str = "") -> tuple[Contract, ...]:
        """Legs as contracts with ids ``contract-0``, ``contract-1``, ..."""
        return tuple(
            Contract(
                id=f"contract-{i}",
                kind=leg.kind,
                strike=leg.strike,
                premium=leg.premium,
                quantity=leg.quantity,
                position=leg.position,
                expiration=leg.expiration,
                underlying=underlying,
            )
            for i, leg in enumerate(self.legs)
        )


STRATEGY_TEMPLATES: tuple[StrategyTemplate, ...] = (
    StrategyTemplate(
        "long-call", "Long Call",
        "Bullish strategy with unlimited upside potential", "Basic",
        (Leg(CALL, 100, 5),),
    ),
    StrategyTemplate(
        "long-put", "Long Put",
        "Bearish strategy with high profit potential", "Basic",
        (Leg(PUT, 100, 5),),
    ),
    # the stock leg is held outside the strategy
    StrategyTemplate(
        "covered-call", "Covered Call",
        "Income strategy for stock owners", "Income",
        (Leg(CALL, 105, 3, position=SHORT),),
    ),
    StrategyTemplate(
        "protective-put", "Protective Put",
        "Insurance for stock positions", "Hedging",
        (Leg(PUT, 95, 4),),
    ),
    StrategyTemplate(
        "bull-call-spread", "Bull Call Spread",
        "Limited risk, limited reward bullish strategy", "Spreads",
        (Leg(CALL, 100, 5), Leg(CALL, 110, 2, position=SHORT)),
    ),
    StrategyTemplate(
        "bear-put-spread", "Bear Put Spread",
        "Limited risk, limited reward bearish strategy", "Spreads",
        (Leg(PUT, 100, 5), Leg(PUT, 90, 2, position=SHORT)),
    ),
    StrategyTemplate(
        "long-straddle", "Long Straddle",
        "Profit from high volatility in either direction", "Volatility",
        (Leg(CALL, 100, 5), Leg(PUT, 100, 5)),
    ),
    StrategyTemplate(
        "long-strangle", "Long Strangle",
        "Lower cost volatility play with wider breakevens", "Volatility",
        (Leg(CALL, 105, 3), Leg(PUT, 95, 3)),
    ),
    StrategyTemplate(
        "iron-condor", "Iron Condor",
        "Profit from low volatility with defined risk", "Advanced",
        (
            Leg(PUT, 90, 1),
            Leg(PUT, 95, 3, position=SHORT),
            Leg(CALL, 105, 3, position=SHORT),
            Leg(CALL, 110, 1),
        ),
    ),
)


def get_template(template_id: str) -> StrategyTemplate:
    for t in STRATEGY_TEMPLATES:
        if t.id == template_id:
            return t
    raise KeyError(template_id)


def strategy_from_template(
    template_id: str, market: MarketParameters, underlying: str = "",
) -> Strategy:
    t = get_template(template_id)
    return Strategy(
        market=market,
        contracts=t.contracts(underlying),
        name=t.name,
        description=t.description,
    )
