"""Tests for portfolio Greeks, risk metrics and position sizing."""

import pytest
from optstrat import (
    CALL, PUT, SHORT, UNBOUNDED, Contract, MarketParameters, PriceRange,
    InvalidInputError, payoff_curve, find_breakevens,
)
from optstrat.risk import (
    contract_greeks, portfolio_greeks, risk_metrics, position_size,
    profit_factor, kelly_percentage, risk_utilization, risk_level,
    risk_warnings, assess_risk,
)
from optstrat.payoff import tail_exposure

MKT = MarketParameters(spot=100, rate=0.05, volatility=0.25, time=30 / 365)
LONG_CALL = Contract("c", CALL, 100, 5)
WINDOW = PriceRange(70, 130, 100)


def _metrics(legs, rng=WINDOW):
    curve = payoff_curve(legs, rng)
    return risk_metrics(curve, find_breakevens(curve))


class TestPortfolioGreeks:
    def test_single_contract(self):
        result = portfolio_greeks([LONG_CALL], MKT)
        assert result.total == contract_greeks(LONG_CALL, MKT)

    def test_long_short_offset(self):
        short = Contract("s", CALL, 100, 5, position=SHORT)
        result = portfolio_greeks([LONG_CALL, short], MKT)
        for v in result.total.as_dict().values():
            assert v == pytest.approx(0.0, abs=1e-12)

    def test_quantity_weighting(self):
        short_puts = Contract("p", PUT, 95, 2, quantity=3, position=SHORT)
        unit = contract_greeks(short_puts, MKT)
        result = portfolio_greeks([short_puts], MKT)
        assert result.total.delta == pytest.approx(-3 * unit.delta, abs=1e-4)
        assert result.total.gamma == pytest.approx(-3 * unit.gamma, abs=1e-4)
        assert result.total.delta > 0

    def test_per_leg_lookup(self):
        spread = [LONG_CALL, Contract("s", CALL, 110, 2, position=SHORT)]
        result = portfolio_greeks(spread, MKT)
        assert [cid for cid, _ in result.legs] == ["c", "s"]
        assert result.for_contract("s").delta < 0
        with pytest.raises(KeyError):
            result.for_contract("missing")

    def test_sum_of_legs(self):
        legs = [LONG_CALL, Contract("p", PUT, 100, 5)]
        result = portfolio_greeks(legs, MKT)
        total = sum(g.vega for _, g in result.legs)
        assert result.total.vega == pytest.approx(total, abs=1e-4)

    def test_empty(self):
        result = portfolio_greeks([], MKT)
        assert result.legs == ()
        assert result.total.delta == 0


class TestRiskMetrics:
    def test_long_call(self):
        m = _metrics([LONG_CALL])
        assert m.max_loss == pytest.approx(-500)
        assert m.max_profit == pytest.approx(2500)
        assert m.probability_of_profit == pytest.approx(41.6)
        assert m.risk_reward_ratio == pytest.approx(5.0)
        assert len(m.breakevens) == 1

    def test_no_loss_is_unbounded_ratio(self):
        free_call = Contract("f", CALL, 100, 0)
        m = _metrics([free_call], PriceRange(50, 150))
        assert m.max_loss == 0
        assert m.risk_reward_ratio is UNBOUNDED

    def test_unbounded_rejects_arithmetic(self):
        with pytest.raises(TypeError):
            UNBOUNDED * 2

    def test_empty_curve(self):
        with pytest.raises(InvalidInputError):
            risk_metrics((), ())

    def test_idempotent(self):
        legs = [LONG_CALL, Contract("p", PUT, 100, 5)]
        assert _metrics(legs) == _metrics(legs)


class TestPositionSize:
    def test_floor_of_one(self):
        assert position_size(10_000, 2, -500) == 1

    def test_budget_covers_several(self):
        assert position_size(10_000, 10, -500) == 2
        assert position_size(50_000, 5, -400) == 6

    def test_no_downside(self):
        assert position_size(10_000, 2, 0) == 0
        assert position_size(10_000, 2, 250) == 0

    def test_zero_budget_still_one(self):
        assert position_size(10_000, 0, -100) == 1

    @pytest.mark.parametrize("args", [(-1, 2, -500), (10_000, 150, -500),
                                      (10_000, 2, float("-inf"))])
    def test_invalid(self, args):
        with pytest.raises(InvalidInputError):
            position_size(*args)


class TestDerivedRatios:
    def test_profit_factor(self):
        assert profit_factor(2500, -500) == 5.0
        assert profit_factor(100, 0) is UNBOUNDED

    def test_kelly(self):
        assert kelly_percentage(60, 2.0) == pytest.approx(40.0)
        assert kelly_percentage(45, 3.0) == 0.0
        assert kelly_percentage(60, UNBOUNDED) == pytest.approx(60.0)

    def test_utilization(self):
        assert risk_utilization(-500, 10_000, 2) == pytest.approx(250.0)
        assert risk_utilization(0, 10_000, 2) == 0.0
        assert risk_utilization(-100, 10_000, 0) is UNBOUNDED

    def test_level(self):
        assert risk_level(50) == "low"
        assert risk_level(50.1) == "medium"
        assert risk_level(80) == "medium"
        assert risk_level(80.1) == "high"
        assert risk_level(UNBOUNDED) == "high"


class TestAssessment:
    def test_short_dated_naked_call(self):
        legs = [Contract("s", CALL, 105, 3, position=SHORT)]
        m = _metrics(legs)
        a = assess_risk(m, 10_000, 2, days_to_expiration=5, tail=tail_exposure(legs))
        assert "Unlimited loss potential" in a.warnings
        assert "High time decay risk" in a.warnings
        assert "Position exceeds risk tolerance" in a.warnings
        assert a.level == "high"
        assert not a.balanced

    def test_balanced(self):
        legs = [Contract("p", PUT, 80, 1, position=SHORT)]
        m = _metrics(legs)
        a = assess_risk(m, 100_000, 2, days_to_expiration=30, tail=tail_exposure(legs))
        assert a.warnings == ()
        assert a.balanced
        assert a.max_risk_amount == pytest.approx(2000)

    def test_low_pop_warning(self):
        m = _metrics([Contract("c", CALL, 100, 10)])
        assert m.probability_of_profit < 40
        assert "Low probability of profit" in risk_warnings(m, 10.0, 30)
