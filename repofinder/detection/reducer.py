"""Candidate pool reduction.

A leg can only take part in a balanced repo if the collateral flows around
it allow it:

- a reverse leg cannot return more than the same-direction collateral
  delivered up to its position (focus included)
- a same-direction leg cannot deliver more than the reverse legs from its
  position onwards could return

Legs failing their test are dropped and the test is repeated until nothing
changes. This is a necessary condition only; it shrinks the pool before the
combination search, it does not prove a balance exists.
"""

from __future__ import annotations

from decimal import Decimal

import structlog

from repofinder.detection.candidates import settlement_order
from repofinder.detection.types import CandidateVector, Leg
from repofinder.models.ledger import Ledger

logger = structlog.get_logger()


def reduce_vector(vector: CandidateVector, ledger: Ledger) -> CandidateVector:
    """Strip legs that cannot belong to any balanced selection.

    Args:
        vector: Candidate vector to reduce
        ledger: Transaction table

    Returns:
        The reduced vector with legs in settlement order, or the focus-only
        vector if the focus itself fails or no legs survive.
    """
    if vector.is_focus_only:
        return vector

    focus = Leg(vector.focus)
    elements = sorted((focus, *vector.legs), key=lambda leg: settlement_order(ledger, leg))
    passes = 0

    while True:
        passes += 1
        kept = _surviving(elements, ledger)
        if len(kept) == len(elements):
            break
        if focus not in kept:
            logger.debug("reducer_dropped_focus", focus=vector.focus, passes=passes)
            return vector.focus_only()
        elements = kept

    legs = [leg for leg in elements if leg != focus]
    if not legs:
        return vector.focus_only()
    return vector.with_legs(legs)


def _surviving(elements: list[Leg], ledger: Ledger) -> list[Leg]:
    """One reduction pass over settlement-ordered elements."""
    faces = [ledger.face(leg.index) for leg in elements]

    # Cumulative same-direction face up to and including each position
    delivered: list[Decimal] = []
    running = Decimal(0)
    for leg, face in zip(elements, faces, strict=True):
        if not leg.reverse:
            running += face
        delivered.append(running)

    # Cumulative reverse face from each position to the end
    returnable: list[Decimal] = [Decimal(0)] * len(elements)
    running = Decimal(0)
    for position in range(len(elements) - 1, -1, -1):
        if elements[position].reverse:
            running += faces[position]
        returnable[position] = running

    kept: list[Leg] = []
    for position, leg in enumerate(elements):
        if leg.reverse:
            if faces[position] <= delivered[position]:
                kept.append(leg)
        elif faces[position] <= returnable[position]:
            kept.append(leg)
    return kept


__all__ = ["reduce_vector"]
