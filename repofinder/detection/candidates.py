"""Candidate vector construction.

For every unclaimed, cash-positive transaction we look forward in time for
legs on the same instrument between the same two participants:

- same-direction legs (same sender and receiver) may extend or roll the repo
- reverse-direction legs (sender and receiver swapped) may repay it

Cheap feasibility screens run before a vector is materialized, so pools that
can never balance are never searched.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from decimal import Decimal

import structlog

from repofinder.config import DetectionConfig
from repofinder.detection.claims import ClaimRegistry
from repofinder.detection.types import CandidateVector, Leg
from repofinder.models.ledger import Ledger

logger = structlog.get_logger()


def index_by_pair(ledger: Ledger) -> dict[tuple[str, str, str], list[int]]:
    """Group transaction indices by (sender, receiver, instrument).

    Each list is sorted by settlement time, then by ledger index.
    """
    groups: dict[tuple[str, str, str], list[int]] = defaultdict(list)
    for index, tx in enumerate(ledger.transactions):
        groups[tx.pair].append(index)
    for indices in groups.values():
        indices.sort(key=lambda i: (ledger.time(i), i))
    return groups


def settlement_order(ledger: Ledger, leg: Leg) -> tuple[float, bool, int]:
    """Sort key: settlement time, reverse legs first on ties, then ledger index."""
    return (ledger.time(leg.index), not leg.reverse, leg.index)


def screen_candidates(
    focus_face: Decimal,
    focus_day: int,
    same_faces: Sequence[Decimal],
    reverse_legs: Sequence[tuple[Decimal, int]],
) -> bool:
    """Check whether a focus and its candidate legs could ever balance.

    Args:
        focus_face: Face value of the focus leg
        focus_day: Settlement day of the focus leg
        same_faces: Face values of same-direction candidates
        reverse_legs: (face value, settlement day) of reverse candidates

    Returns:
        True if the pool passes every screen and is worth searching
    """
    if not reverse_legs:
        return False

    reverse_faces = sorted(face for face, _ in reverse_legs)

    # Repayments must at least cover the opening leg
    if sum(reverse_faces) < focus_face:
        return False

    # The smallest repayment cannot exceed everything that was delivered
    if reverse_faces[0] > focus_face + sum(same_faces):
        return False

    # Without same-direction legs a multi-leg repo needs at least two
    # repayments that fit inside the focus
    if len(reverse_faces) >= 2 and not same_faces:
        if reverse_faces[0] + reverse_faces[1] > focus_face:
            return False

    # Same-day-only pools belong to intraday detection
    return any(day > focus_day for _, day in reverse_legs)


def build_candidate_vectors(
    ledger: Ledger,
    config: DetectionConfig,
    claims: ClaimRegistry | None = None,
) -> list[CandidateVector]:
    """Build one candidate vector per qualifying focus transaction.

    Args:
        ledger: Transaction table
        config: Detection configuration (maturity_cap is used here)
        claims: Transactions already assigned to a repo

    Returns:
        Candidate vectors in focus (ledger) order, legs in ascending
        settlement time.
    """
    if claims is None:
        claims = ClaimRegistry()

    by_pair = index_by_pair(ledger)
    vectors: list[CandidateVector] = []
    screened_out = 0

    for focus, tx in enumerate(ledger.transactions):
        if not tx.is_cash_positive or focus in claims:
            continue
        if tx.pair == tx.reverse_pair:
            # Self-transfers would list every later one as both a same and a reverse leg
            continue

        same = _window(ledger, by_pair.get(tx.pair, []), focus, config.maturity_cap, claims)
        reverse = _window(
            ledger, by_pair.get(tx.reverse_pair, []), focus, config.maturity_cap, claims
        )
        if not reverse:
            continue

        if not screen_candidates(
            tx.face_value,
            tx.day,
            [ledger.face(i) for i in same],
            [(ledger.face(i), ledger.day(i)) for i in reverse],
        ):
            screened_out += 1
            continue

        legs = [Leg(i) for i in same] + [Leg(i, reverse=True) for i in reverse]
        legs.sort(key=lambda leg: settlement_order(ledger, leg))
        vectors.append(CandidateVector.build(focus, legs))

    logger.debug(
        "candidate_vectors_built",
        transactions=len(ledger),
        vectors=len(vectors),
        screened_out=screened_out,
    )
    return vectors


def _window(
    ledger: Ledger,
    indices: list[int],
    focus: int,
    maturity_cap: int,
    claims: ClaimRegistry,
) -> list[int]:
    """Unclaimed cash-positive legs settling after the focus within the maturity cap."""
    start = ledger.time(focus)
    last_day = ledger.day(focus) + maturity_cap
    window: list[int] = []
    for i in indices:
        if i == focus or ledger.time(i) <= start:
            continue
        if ledger.day(i) > last_day:
            # Sorted by time, nothing later can qualify
            break
        if i in claims or not ledger[i].is_cash_positive:
            continue
        window.append(i)
    return window


__all__ = [
    "build_candidate_vectors",
    "index_by_pair",
    "screen_candidates",
    "settlement_order",
]
