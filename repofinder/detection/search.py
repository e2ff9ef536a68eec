"""Combination search over candidate vectors.

Two strategies look for selections of legs whose face values balance the
focus leg:

- ExhaustiveSearch enumerates every subset of a bounded pool, in mask order
- IncrementalSearch generates subsets size by size over a longer pool and
  stops at the first size that yields a detection

Both share the same acceptance checks (SelectionChecker) and hand their
balanced selections to the interest filter. CombinationSearch tries them in
order, like a chain of solution strategies.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from itertools import combinations
from typing import Protocol

import structlog

from repofinder.config import DetectionConfig
from repofinder.detection.interest import FeasibleSelection, filter_feasible
from repofinder.detection.types import CandidateVector, Outcome
from repofinder.models.ledger import Ledger

logger = structlog.get_logger()


class SelectionChecker:
    """Acceptance checks shared by every search strategy.

    A selection is a tuple of positions into the vector's legs. It is
    accepted when it holds at most `limit` legs, its sign-adjusted face sum
    equals the focus face value, and at least one selected leg settles after
    the focus day (same-day-only selections are intraday repos).
    """

    def __init__(self, vector: CandidateVector, ledger: Ledger, limit: int) -> None:
        self.limit = limit
        self.target: Decimal = ledger.face(vector.focus)
        focus_day = ledger.day(vector.focus)
        # Reverse legs return collateral, same-direction legs add to what is owed
        self.contributions: list[Decimal] = [
            -leg.sign * ledger.face(leg.index) for leg in vector.legs
        ]
        self.later_day: list[bool] = [ledger.day(leg.index) > focus_day for leg in vector.legs]

    def within_limit(self, positions: Sequence[int]) -> bool:
        return 0 < len(positions) <= self.limit

    def is_balanced(self, positions: Sequence[int]) -> bool:
        return sum((self.contributions[p] for p in positions), Decimal(0)) == self.target

    def is_intraday(self, positions: Sequence[int]) -> bool:
        return not any(self.later_day[p] for p in positions)

    def accepts(self, positions: Sequence[int]) -> bool:
        return (
            self.within_limit(positions)
            and self.is_balanced(positions)
            and not self.is_intraday(positions)
        )


class SearchStrategy(Protocol):
    """Protocol for combination search strategies."""

    outcome: Outcome

    def search(
        self,
        vector: CandidateVector,
        ledger: Ledger,
        limit: int,
        config: DetectionConfig,
    ) -> FeasibleSelection | None:
        """Return the selected legs for this vector, or None if nothing fits."""
        ...


class ExhaustiveSearch:
    """Enumerate all subsets of the first `matrix_max` legs.

    Selections reach the interest filter in ascending mask order, bit i
    standing for leg i, which fixes the tie-break order. Subsets larger than
    the round limit are never generated.
    """

    outcome = Outcome.EXHAUSTIVE

    def search(
        self,
        vector: CandidateVector,
        ledger: Ledger,
        limit: int,
        config: DetectionConfig,
    ) -> FeasibleSelection | None:
        pool = vector.truncated(config.matrix_max)
        checker = SelectionChecker(pool, ledger, limit)
        balanced = self._balanced(checker, len(pool.legs))
        if not balanced:
            return None
        return filter_feasible(pool, balanced, ledger, config)

    @staticmethod
    def _balanced(checker: SelectionChecker, n: int) -> list[tuple[int, ...]]:
        # Only sizes up to the limit are generated, then put back in mask order
        accepted = [
            positions
            for size in range(1, min(checker.limit, n) + 1)
            for positions in combinations(range(n), size)
            if checker.accepts(positions)
        ]
        accepted.sort(key=lambda positions: sum(1 << p for p in positions))
        return accepted


class IncrementalSearch:
    """Generate subsets of the first `iter_max` legs by increasing size.

    Only used for vectors longer than `matrix_max`; shorter vectors were
    already searched exhaustively.
    """

    outcome = Outcome.INCREMENTAL

    def search(
        self,
        vector: CandidateVector,
        ledger: Ledger,
        limit: int,
        config: DetectionConfig,
    ) -> FeasibleSelection | None:
        if not config.use_iterative or len(vector.legs) <= config.matrix_max:
            return None

        pool = vector.truncated(config.iter_max)
        checker = SelectionChecker(pool, ledger, limit)
        n = len(pool.legs)

        for size in range(1, min(limit, n) + 1):
            balanced = [c for c in combinations(range(n), size) if checker.accepts(c)]
            if not balanced:
                continue
            selection = filter_feasible(pool, balanced, ledger, config)
            if selection is not None:
                logger.debug(
                    "incremental_search_matched",
                    focus=vector.focus,
                    size=size,
                    candidates=len(balanced),
                )
                return selection
        return None


@dataclass(frozen=True)
class SearchResult:
    """Outcome of searching one candidate vector."""

    outcome: Outcome
    selection: FeasibleSelection | None = None


class CombinationSearch:
    """Run search strategies in order until one yields a selection.

    Args:
        strategies: Strategies to try. Defaults to exhaustive then incremental.
    """

    def __init__(self, strategies: list[SearchStrategy] | None = None) -> None:
        if strategies is None:
            strategies = [ExhaustiveSearch(), IncrementalSearch()]
        self.strategies = strategies

    def search(
        self,
        vector: CandidateVector,
        ledger: Ledger,
        limit: int,
        config: DetectionConfig,
    ) -> SearchResult:
        for strategy in self.strategies:
            selection = strategy.search(vector, ledger, limit, config)
            if selection is not None:
                return SearchResult(outcome=strategy.outcome, selection=selection)
        return SearchResult(outcome=Outcome.NONE)


__all__ = [
    "CombinationSearch",
    "ExhaustiveSearch",
    "IncrementalSearch",
    "SearchResult",
    "SearchStrategy",
    "SelectionChecker",
]
