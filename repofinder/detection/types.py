"""Data structures shared by the detection stages."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple


class Outcome(str, Enum):
    """How a processed candidate vector was resolved."""

    EXHAUSTIVE = "exhaustive"
    INCREMENTAL = "incremental"
    NONE = "none"


class Leg(NamedTuple):
    """A transaction's role relative to a focus leg.

    Attributes:
        index: Ledger index of the transaction
        reverse: True if it moves cash against the focus (a repayment leg),
            False if it moves cash the same way (an opening or rolling leg)
    """

    index: int
    reverse: bool = False

    @property
    def sign(self) -> int:
        return -1 if self.reverse else 1

    def __str__(self) -> str:
        return f"-{self.index}" if self.reverse else f"+{self.index}"


@dataclass(frozen=True)
class CandidateVector:
    """Pool of legs that may belong to the repo opened by `focus`.

    The vector never grows. Stripping legs produces a new vector that keeps
    the `capacity` it was originally built with, so diagnostics can report
    how far a pool shrank.

    Attributes:
        focus: Ledger index of the opening leg
        legs: Candidate legs in vector order
        capacity: Number of elements (focus included) at construction
    """

    focus: int
    legs: tuple[Leg, ...] = ()
    capacity: int = 0

    def __post_init__(self) -> None:
        if self.capacity < self.length:
            object.__setattr__(self, "capacity", self.length)

    @classmethod
    def build(cls, focus: int, legs: Iterable[Leg]) -> CandidateVector:
        legs = tuple(legs)
        return cls(focus=focus, legs=legs, capacity=len(legs) + 1)

    @property
    def length(self) -> int:
        """Number of elements, focus included."""
        return len(self.legs) + 1

    @property
    def is_focus_only(self) -> bool:
        return not self.legs

    def with_legs(self, legs: Iterable[Leg]) -> CandidateVector:
        """Return a vector with the same focus and capacity but new legs."""
        return CandidateVector(focus=self.focus, legs=tuple(legs), capacity=self.capacity)

    def focus_only(self) -> CandidateVector:
        """Return the "no feasible combination" sentinel for this focus."""
        return self.with_legs(())

    def without(self, indices: Iterable[int]) -> CandidateVector:
        """Drop legs whose ledger index is in `indices`."""
        drop = set(indices)
        return self.with_legs(leg for leg in self.legs if leg.index not in drop)

    def truncated(self, max_legs: int) -> CandidateVector:
        return self.with_legs(self.legs[:max_legs])

    def __str__(self) -> str:
        return "(" + ", ".join([str(self.focus), *(str(leg) for leg in self.legs)]) + ")"


@dataclass(frozen=True)
class DetectedRepo:
    """A finalized multi-leg repo.

    Attributes:
        focus: Ledger index of the opening leg
        legs: Selected legs with their roles, in vector order
        round_limit: Transaction-count limit of the round that found it
        method: Search method that produced the selection
        maturity_days: Days from the focus to the latest selected leg
        implied_rate: Daily rate within the band at which the repo's NPV is zero
    """

    focus: int
    legs: tuple[Leg, ...]
    round_limit: int
    method: Outcome
    maturity_days: int
    implied_rate: float

    @property
    def transactions(self) -> frozenset[int]:
        """Ledger indices claimed by this repo."""
        return frozenset((self.focus, *(leg.index for leg in self.legs)))


@dataclass(frozen=True)
class CandidateStat:
    """Diagnostics for one searched candidate vector."""

    focus: int
    round_limit: int
    length: int
    capacity: int
    outcome: Outcome


@dataclass
class DetectionResult:
    """Output of a detection run.

    Attributes:
        repos: Detected repos in detection order
        stats: One entry per candidate vector that reached the search stage
        claimed: Final claimed set (initial claims plus every detected repo)
        completed: False if the run stopped at a deadline before the last round
    """

    repos: list[DetectedRepo] = field(default_factory=list)
    stats: list[CandidateStat] = field(default_factory=list)
    claimed: frozenset[int] = frozenset()
    completed: bool = True

    def outcome_counts(self) -> dict[Outcome, int]:
        """Tally the search outcomes over all processed vectors."""
        counts = Counter(stat.outcome for stat in self.stats)
        return {outcome: counts.get(outcome, 0) for outcome in Outcome}

    @classmethod
    def empty(cls, claimed: Iterable[int] = ()) -> DetectionResult:
        return cls(claimed=frozenset(claimed))
