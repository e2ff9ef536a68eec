"""Unit tests for the interest feasibility filter."""

import math

import pytest

from repofinder.detection.interest import (
    CashFlow,
    cash_flows,
    filter_feasible,
    implied_rate,
    present_value,
)
from repofinder.detection.types import Leg
from tests.helpers import BANK_A, BANK_B, make_ledger, make_transaction, make_vector


def equal_maturity_ledger():
    """Focus of 1000 and four 500 repayments all on day 5."""
    return make_ledger(
        make_transaction(BANK_A, BANK_B, face=1000, cash=100, time=0),
        make_transaction(BANK_B, BANK_A, face=500, cash=51, time=5.0),
        make_transaction(BANK_B, BANK_A, face=500, cash=51, time=5.1),
        make_transaction(BANK_B, BANK_A, face=500, cash=51, time=5.2),
        make_transaction(BANK_B, BANK_A, face=500, cash=51, time=5.3),
    )


class TestPresentValue:
    """Tests for present_value and cash_flows."""

    def test_undiscounted(self):
        """At a zero rate the present value is the plain sum."""
        flows = [CashFlow(100.0, 0), CashFlow(-102.0, 5)]

        assert present_value(flows, 0.0) == pytest.approx(-2.0)

    def test_discounted(self):
        """Later flows are discounted per night."""
        flows = [CashFlow(100.0, 0), CashFlow(-102.0, 5)]

        assert present_value(flows, 0.01) == pytest.approx(100 - 102 / 1.01**5)

    def test_cash_flow_signs(self, ledger_abc):
        """The focus brings cash in, repayments pay it back."""
        flows = cash_flows(0, (Leg(1, reverse=True), Leg(2, reverse=True)), ledger_abc)

        assert flows == [CashFlow(100.0, 0), CashFlow(-51.0, 5), CashFlow(-51.0, 5)]

    def test_discount_factor_overflow_saturates(self):
        """A rate close to -1 over many nights gives -inf instead of raising."""
        flows = [CashFlow(100.0, 0), CashFlow(-102.0, 200)]

        assert present_value(flows, -0.99) == -math.inf

    def test_discount_factor_underflow_vanishes(self):
        """A large rate over many nights discounts a late flow to nothing."""
        flows = [CashFlow(100.0, 0), CashFlow(-102.0, 1100)]

        assert present_value(flows, 1.0) == pytest.approx(100.0)


class TestImpliedRate:
    """Tests for implied_rate."""

    def test_rate_inside_band(self):
        """The root is found between the band limits."""
        flows = [CashFlow(100.0, 0), CashFlow(-102.0, 5)]

        rate = implied_rate(flows, 0.0, 0.01)

        assert rate == pytest.approx(1.02**0.2 - 1, abs=1e-9)
        assert present_value(flows, rate) == pytest.approx(0.0, abs=1e-6)

    def test_outside_band(self):
        """No root inside the band returns None."""
        flows = [CashFlow(100.0, 0), CashFlow(-102.0, 5)]

        assert implied_rate(flows, 0.005, 0.01) is None

    def test_zero_at_lower_bound(self):
        """A repo repaid at par has a zero rate."""
        flows = [CashFlow(100.0, 0), CashFlow(-100.0, 5)]

        assert implied_rate(flows, 0.0, 0.01) == 0.0

    def test_zero_at_upper_bound(self):
        """A repo repaid exactly at the upper rate returns the upper bound."""
        flows = [CashFlow(100.0, 0), CashFlow(-100.0 * 1.01**5, 5)]

        assert implied_rate(flows, 0.0, 0.01, tolerance=1e-9) == 0.01

    def test_degenerate_band(self):
        """A single-rate band accepts only flows balancing at that rate."""
        assert implied_rate([CashFlow(100.0, 0), CashFlow(-100.0, 3)], 0.0, 0.0) == 0.0
        assert implied_rate([CashFlow(100.0, 0), CashFlow(-101.0, 3)], 0.0, 0.0) is None

    @pytest.mark.parametrize(
        "nights, lower, upper",
        [(200, -0.99, 0.01), (1100, 0.0, 1.0), (1100, -0.99, 1.0)],
    )
    def test_extreme_band(self, nights, lower, upper):
        """The root is still found when the band edges leave the float range."""
        flows = [CashFlow(100.0, 0), CashFlow(-102.0, nights)]

        rate = implied_rate(flows, lower, upper)

        assert rate == pytest.approx(1.02 ** (1 / nights) - 1, rel=1e-6)


class TestFilterFeasible:
    """Tests for filter_feasible."""

    def test_no_selections(self, ledger_abc, config):
        """Nothing to filter returns None."""
        assert filter_feasible(make_vector(0, -1, -2), [], ledger_abc, config) is None

    def test_first_encountered_wins_on_equal_maturity(self, config):
        """Among equally short selections the first one is kept."""
        ledger = equal_maturity_ledger()
        vector = make_vector(0, -1, -2, -3, -4)

        first = filter_feasible(vector, [(0, 1), (2, 3)], ledger, config)
        swapped = filter_feasible(vector, [(2, 3), (0, 1)], ledger, config)

        assert first is not None and swapped is not None
        assert first.legs == (Leg(1, reverse=True), Leg(2, reverse=True))
        assert swapped.legs == (Leg(3, reverse=True), Leg(4, reverse=True))

    def test_deterministic(self, config):
        """Re-running with identical input yields the identical choice."""
        ledger = equal_maturity_ledger()
        vector = make_vector(0, -1, -2, -3, -4)
        selections = [(0, 1), (0, 2), (1, 3), (2, 3)]

        runs = {filter_feasible(vector, selections, ledger, config) for _ in range(3)}

        assert len(runs) == 1

    def test_shortest_maturity_preferred(self, config):
        """A later-listed selection with shorter maturity beats an earlier one."""
        ledger = make_ledger(
            make_transaction(BANK_A, BANK_B, face=1000, cash=100, time=0),
            make_transaction(BANK_B, BANK_A, face=500, cash=51, time=10.0),
            make_transaction(BANK_B, BANK_A, face=500, cash=51, time=10.5),
            make_transaction(BANK_B, BANK_A, face=500, cash="50.5", time=5.0),
            make_transaction(BANK_B, BANK_A, face=500, cash="50.5", time=5.5),
        )
        vector = make_vector(0, -1, -2, -3, -4)

        selection = filter_feasible(vector, [(0, 1), (2, 3)], ledger, config)

        assert selection is not None
        assert selection.maturity_days == 5
        assert selection.legs == (Leg(3, reverse=True), Leg(4, reverse=True))

    def test_infeasible_selections_skipped(self, config):
        """Selections implying too much interest are discarded."""
        ledger = make_ledger(
            make_transaction(BANK_A, BANK_B, face=1000, cash=100, time=0),
            make_transaction(BANK_B, BANK_A, face=500, cash=60, time=1.0),
            make_transaction(BANK_B, BANK_A, face=500, cash=60, time=1.5),
            make_transaction(BANK_B, BANK_A, face=500, cash=51, time=5.0),
            make_transaction(BANK_B, BANK_A, face=500, cash=51, time=5.5),
        )
        vector = make_vector(0, -1, -2, -3, -4)

        selection = filter_feasible(vector, [(0, 1), (2, 3)], ledger, config)

        assert selection is not None
        assert selection.legs == (Leg(3, reverse=True), Leg(4, reverse=True))
