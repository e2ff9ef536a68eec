"""Interest feasibility of face-balanced selections.

Cash flows are seen from the focus leg's sender: the focus and any
same-direction legs bring cash in, reverse legs pay it back. Each flow is
discounted over the nights elapsed since the focus settled:

    PV(r) = sum(cash_i / (1 + r) ** nights_i)

A selection is feasible when zero present value is reachable inside the
rate band, i.e. PV(lower) <= 0 <= PV(upper).
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import structlog
from scipy.optimize import brentq

from repofinder.config import DetectionConfig
from repofinder.detection.types import CandidateVector, Leg
from repofinder.models.ledger import Ledger

logger = structlog.get_logger()

# Relative tolerance on present values, scaled by the focus cash amount
PV_TOLERANCE = 1e-9


@dataclass(frozen=True)
class CashFlow:
    """Signed cash amount settling a number of nights after the focus."""

    amount: float
    nights: int


@dataclass(frozen=True)
class FeasibleSelection:
    """A face-balanced selection whose implied rate lies inside the band.

    Attributes:
        legs: Selected legs in vector order
        maturity_days: Nights from the focus to the latest selected leg
        implied_rate: Daily rate at which the selection's NPV is zero
    """

    legs: tuple[Leg, ...]
    maturity_days: int
    implied_rate: float


def _scaled_present_value(flows: Iterable[CashFlow], rate: float) -> tuple[float, float]:
    """Present value split as (scaled sum, log scale).

    PV(r) == scaled * exp(scale). Terms are shifted by the largest exponent so
    the scaled sum stays finite and keeps the sign of the present value for
    any rate above -1.
    """
    log_growth = math.log1p(rate)
    terms = [(flow.amount, -flow.nights * log_growth) for flow in flows]
    if not terms:
        return 0.0, 0.0
    scale = max(exponent for _, exponent in terms)
    scaled = math.fsum(amount * math.exp(exponent - scale) for amount, exponent in terms)
    return scaled, scale


def present_value(flows: Iterable[CashFlow], rate: float) -> float:
    """Discount cash flows at a constant daily rate.

    Discount factors that leave the float range saturate: the result is
    +/-inf instead of raising, and vanishing terms count as zero.
    """
    scaled, scale = _scaled_present_value(flows, rate)
    if scaled == 0.0:
        return 0.0
    try:
        return scaled * math.exp(scale)
    except OverflowError:
        return math.copysign(math.inf, scaled)


def cash_flows(focus: int, legs: Sequence[Leg], ledger: Ledger) -> list[CashFlow]:
    """Cash flows of a hypothesized repo, focus first."""
    focus_day = ledger.day(focus)
    flows = [CashFlow(amount=float(ledger.cash(focus)), nights=0)]
    for leg in legs:
        flows.append(
            CashFlow(
                amount=leg.sign * float(ledger.cash(leg.index)),
                nights=ledger.day(leg.index) - focus_day,
            )
        )
    return flows


def implied_rate(
    flows: Sequence[CashFlow], lower: float, upper: float, tolerance: float = 0.0
) -> float | None:
    """Find the daily rate in [lower, upper] at which the flows' NPV is zero.

    Args:
        flows: Signed cash flows
        lower: Lower bound of the rate band
        upper: Upper bound of the rate band
        tolerance: Absolute tolerance on present values

    Returns:
        The rate, or None if zero NPV is not reachable inside the band
    """
    pv_lower = present_value(flows, lower)
    pv_upper = present_value(flows, upper)

    if pv_lower > tolerance or pv_upper < -tolerance:
        return None
    if abs(pv_lower) <= tolerance:
        return lower
    if abs(pv_upper) <= tolerance:
        return upper

    # Root of the scaled sum: same sign as PV, but finite across the band
    return float(brentq(lambda rate: _scaled_present_value(flows, rate)[0], lower, upper))


def filter_feasible(
    vector: CandidateVector,
    selections: Iterable[Sequence[int]],
    ledger: Ledger,
    config: DetectionConfig,
) -> FeasibleSelection | None:
    """Pick the interest-feasible selection with the shortest maturity.

    Args:
        vector: Candidate vector the selections refer to
        selections: Face-balanced selections, as positions into `vector.legs`,
            in enumeration order
        ledger: Transaction table
        config: Detection configuration (interest band)

    Returns:
        The first feasible selection among those with the smallest maximum
        maturity, or None if no selection is feasible.
    """
    tolerance = PV_TOLERANCE * float(ledger.cash(vector.focus))
    focus_day = ledger.day(vector.focus)

    best: FeasibleSelection | None = None
    feasible = 0

    for positions in selections:
        legs = tuple(vector.legs[p] for p in positions)
        flows = cash_flows(vector.focus, legs, ledger)
        rate = implied_rate(flows, config.interest_lower, config.interest_upper, tolerance)
        if rate is None:
            continue

        feasible += 1
        maturity = max(ledger.day(leg.index) for leg in legs) - focus_day
        # Strict comparison: ties keep the selection encountered first
        if best is None or maturity < best.maturity_days:
            best = FeasibleSelection(legs=legs, maturity_days=maturity, implied_rate=rate)

    if feasible > 1:
        logger.debug(
            "interest_filter_tie_break",
            focus=vector.focus,
            feasible=feasible,
            maturity_days=best.maturity_days if best else None,
        )
    return best


__all__ = [
    "CashFlow",
    "FeasibleSelection",
    "cash_flows",
    "filter_feasible",
    "implied_rate",
    "present_value",
]
