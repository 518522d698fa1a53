"""Tests for the expiration payoff curve and breakeven finder."""

import numpy as np
import pytest
from optstrat import CALL, PUT, SHORT, Contract, PriceRange
from optstrat.payoff import (
    intrinsic_value, contract_payoff, payoff_curve, find_breakevens, tail_exposure,
)

LONG_CALL = Contract("c", CALL, 100, 5)
LONG_PUT = Contract("p", PUT, 100, 5)
WINDOW = PriceRange(70, 130, 100)


class TestContractPayoff:
    def test_intrinsic(self):
        assert intrinsic_value(LONG_CALL, 112) == 12
        assert intrinsic_value(LONG_PUT, 112) == 0
        np.testing.assert_allclose(intrinsic_value(LONG_PUT, [90, 100, 110]), [10, 0, 0])

    def test_long_call_multiplier(self):
        assert contract_payoff(LONG_CALL, 120) == pytest.approx(1500)
        assert contract_payoff(LONG_CALL, 80) == pytest.approx(-500)

    def test_short_mirrors_long(self):
        short = Contract("s", CALL, 100, 5, position=SHORT)
        for px in (80, 100, 104, 130):
            assert contract_payoff(short, px) == -contract_payoff(LONG_CALL, px)

    def test_quantity(self):
        triple = Contract("t", PUT, 100, 5, quantity=3)
        assert contract_payoff(triple, 90) == pytest.approx(3 * contract_payoff(LONG_PUT, 90))


class TestPayoffCurve:
    def test_length_and_order(self):
        curve = payoff_curve([LONG_CALL], WINDOW)
        assert len(curve) == 101
        prices = [p.price for p in curve]
        assert prices[0] == 70
        assert prices[-1] == pytest.approx(130)
        assert all(b > a for a, b in zip(prices, prices[1:]))

    def test_empty(self):
        assert payoff_curve([], WINDOW) == ()

    def test_long_call_max_loss_window_independent(self):
        for rng in (PriceRange(50, 150), WINDOW, PriceRange(100, 200, 50)):
            curve = payoff_curve([LONG_CALL], rng)
            assert min(p.profit for p in curve) == pytest.approx(-500)

    def test_straddle_symmetric(self):
        curve = payoff_curve([LONG_CALL, LONG_PUT], WINDOW)
        profits = [p.profit for p in curve]
        np.testing.assert_allclose(profits, profits[::-1], atol=1e-6)

    def test_idempotent(self):
        legs = [LONG_CALL, Contract("s", CALL, 110, 2, position=SHORT)]
        a = payoff_curve(legs, WINDOW)
        b = payoff_curve(legs, WINDOW)
        assert a == b
        assert find_breakevens(a) == find_breakevens(b)


class TestBreakevens:
    def test_single_long_call(self):
        be = find_breakevens(payoff_curve([LONG_CALL], WINDOW))
        assert len(be) == 1
        assert be[0] == pytest.approx(105.0, abs=0.5)

    def test_long_straddle(self):
        be = find_breakevens(payoff_curve([LONG_CALL, LONG_PUT], WINDOW))
        assert len(be) == 2
        assert be[0] == pytest.approx(90.0, abs=0.3)
        assert be[1] == pytest.approx(110.0, abs=0.3)

    def test_ascending(self):
        legs = [
            Contract("a", PUT, 90, 1), Contract("b", PUT, 95, 3, position=SHORT),
            Contract("c", CALL, 105, 3, position=SHORT), Contract("d", CALL, 110, 1),
        ]
        be = find_breakevens(payoff_curve(legs, WINDOW))
        assert list(be) == sorted(be)
        assert len(be) == 2

    def test_no_crossing(self):
        deep = Contract("x", CALL, 100, 50)
        assert find_breakevens(payoff_curve([deep], WINDOW)) == ()

    def test_crossings_in_one_interval_collapse(self):
        # narrow butterfly: positive only between 99.25 and 100.75
        fly = [
            Contract("a", CALL, 99, 0.25),
            Contract("b", CALL, 100, 0, quantity=2, position=SHORT),
            Contract("c", CALL, 101, 0),
        ]
        coarse = payoff_curve(fly, PriceRange(91, 111, 4))
        assert find_breakevens(coarse) == ()

        fine = find_breakevens(payoff_curve(fly, PriceRange(91, 111, 400)))
        assert len(fine) == 2
        assert fine[0] == pytest.approx(99.25, abs=0.05)
        assert fine[1] == pytest.approx(100.75, abs=0.05)


class TestTailExposure:
    def test_long_call(self):
        t = tail_exposure([LONG_CALL])
        assert t.unbounded_profit and not t.unbounded_loss
        assert t.slope == 100

    def test_naked_short_call(self):
        t = tail_exposure([Contract("s", CALL, 105, 3, quantity=2, position=SHORT)])
        assert t.unbounded_loss
        assert t.slope == -200

    def test_spread_and_puts_bounded(self):
        spread = [LONG_CALL, Contract("s", CALL, 110, 2, position=SHORT)]
        for legs in (spread, [LONG_PUT], []):
            t = tail_exposure(legs)
            assert not t.unbounded_profit and not t.unbounded_loss
