# optstrat: multi-leg options strategy analytics
# Public API

# Data model
from .core import (
    CALL, PUT, LONG, SHORT, CONTRACT_MULTIPLIER,
    Contract, MarketParameters, PriceRange, Greeks, PayoffPoint, RiskMetrics,
    signed_weight,
)
from .errors import InvalidInputError, Unbounded, UNBOUNDED, is_unbounded

# Pricing model & implied vol
from .black_scholes import (
    norm_cdf, norm_pdf, d1_d2, price, greeks, implied_vol, ImpliedVolResult,
)

# Payoff curve & breakevens
from .payoff import (
    intrinsic_value, contract_payoff, payoff_curve, find_breakevens,
    TailExposure, tail_exposure,
)

# Risk engine
from .risk import (
    contract_greeks, PortfolioGreeks, portfolio_greeks,
    risk_metrics, position_size,
    profit_factor, kelly_percentage, risk_utilization, risk_level,
    risk_warnings, RiskAssessment, assess_risk,
)

# Strategy snapshots
from .strategy import Strategy, StrategyAnalysis, analyze, next_contract_id
from .templates import (
    Leg, StrategyTemplate, STRATEGY_TEMPLATES, get_template, strategy_from_template,
)

# Market data boundary
from .market_data import (
    Quote, MOCK_QUOTES, get_mock_quote, parse_global_quote, historical_volatility,
)

__all__ = [
    # Data model
    "CALL", "PUT", "LONG", "SHORT", "CONTRACT_MULTIPLIER",
    "Contract", "MarketParameters", "PriceRange", "Greeks", "PayoffPoint",
    "RiskMetrics", "signed_weight",
    "InvalidInputError", "Unbounded", "UNBOUNDED", "is_unbounded",
    # Pricing
    "norm_cdf", "norm_pdf", "d1_d2", "price", "greeks",
    "implied_vol", "ImpliedVolResult",
    # Payoff
    "intrinsic_value", "contract_payoff", "payoff_curve", "find_breakevens",
    "TailExposure", "tail_exposure",
    # Risk
    "contract_greeks", "PortfolioGreeks", "portfolio_greeks",
    "risk_metrics", "position_size",
    "profit_factor", "kelly_percentage", "risk_utilization", "risk_level",
    "risk_warnings", "RiskAssessment", "assess_risk",
    # Strategy
    "Strategy", "StrategyAnalysis", "analyze", "next_contract_id",
    "Leg", "StrategyTemplate", "STRATEGY_TEMPLATES", "get_template",
    "strategy_from_template",
    # Market data
    "Quote", "MOCK_QUOTES", "get_mock_quote", "parse_global_quote",
    "historical_volatility",
]

__version__ = "0.1.0"
