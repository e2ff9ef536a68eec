"""Round driver and conflict resolution.

Detection widens the number of legs a repo may select one round at a time,
from 2 up to `transaction_cap`. Each round:

1. strips already-claimed legs from every vector and drops vectors whose
   focus is claimed
2. re-reduces vectors too long for exhaustive search
3. discards vectors with fewer than two legs
4. searches the remaining vectors, latest focus first; a detection claims
   its transactions for the rest of the round so later vectors cannot reuse
   them
5. merges the round's claims into the global registry

Rounds are processed sequentially: whether a vector may use a transaction
depends on the detections made before it in the same round.
"""

from __future__ import annotations

import time

import structlog

from repofinder.config import DetectionConfig
from repofinder.detection.claims import ClaimRegistry
from repofinder.detection.reducer import reduce_vector
from repofinder.detection.search import CombinationSearch
from repofinder.detection.types import (
    CandidateStat,
    CandidateVector,
    DetectedRepo,
    DetectionResult,
)
from repofinder.models.ledger import Ledger

logger = structlog.get_logger()

# Smallest transaction-count limit; two-leg repos are found upstream
FIRST_ROUND_LIMIT = 2


class RoundDriver:
    """Run detection rounds over a set of candidate vectors.

    The driver owns the claimed registry for the duration of the run; it is
    only mutated when a round ends.

    Args:
        ledger: Transaction table
        config: Detection configuration
        claims: Transactions already assigned (intraday, two-leg passes).
            Extended in place with every detected repo.
        search: Combination search to use. Defaults to exhaustive then
            incremental.
    """

    def __init__(
        self,
        ledger: Ledger,
        config: DetectionConfig,
        claims: ClaimRegistry | None = None,
        search: CombinationSearch | None = None,
    ) -> None:
        self.ledger = ledger
        self.config = config
        self.claims = claims if claims is not None else ClaimRegistry()
        self.search = search if search is not None else CombinationSearch()

    def run(
        self,
        vectors: list[CandidateVector],
        deadline: float | None = None,
    ) -> DetectionResult:
        """Detect repos among the given candidate vectors.

        Args:
            vectors: Candidate vectors in construction order
            deadline: Optional `time.monotonic()` value. Checked between
                rounds; once passed, the remaining rounds are skipped.

        Returns:
            DetectionResult with repos, per-vector diagnostics and the final
            claimed set
        """
        result = DetectionResult()
        pending = list(vectors)

        for limit in range(FIRST_ROUND_LIMIT, self.config.transaction_cap + 1):
            if deadline is not None and time.monotonic() >= deadline:
                logger.warning(
                    "detection_deadline_reached",
                    next_limit=limit,
                    repos=len(result.repos),
                    pending_vectors=len(pending),
                )
                result.completed = False
                break

            pending = self._prepare(pending)
            if not pending:
                break

            repos = self.run_round(pending, limit, result)
            logger.info(
                "round_completed",
                limit=limit,
                vectors=len(pending),
                detections=len(repos),
                claimed=len(self.claims),
            )

        result.claimed = self.claims.snapshot()
        return result

    def _prepare(self, vectors: list[CandidateVector]) -> list[CandidateVector]:
        """Apply global claims, re-reduce long vectors and drop hopeless ones."""
        claimed = self.claims.snapshot()
        prepared: list[CandidateVector] = []
        for vector in vectors:
            if vector.focus in claimed:
                continue
            vector = vector.without(claimed)
            if vector.length > self.config.matrix_max + 1:
                vector = reduce_vector(vector, self.ledger)
            if vector.length <= 2:
                continue
            prepared.append(vector)
        return prepared

    def run_round(
        self,
        vectors: list[CandidateVector],
        limit: int,
        result: DetectionResult,
    ) -> list[DetectedRepo]:
        """Process one round at the given transaction-count limit.

        Vectors are visited in reverse construction order. Detections are
        appended to `result` and claimed globally once the round ends.

        Returns:
            Repos detected in this round
        """
        round_claims = ClaimRegistry()
        detected: list[DetectedRepo] = []

        for vector in reversed(vectors):
            if vector.focus in round_claims:
                continue

            vector = reduce_vector(vector.without(round_claims.snapshot()), self.ledger)
            if len(vector.legs) < 2 or self._is_intraday(vector):
                continue

            found = self.search.search(vector, self.ledger, limit, self.config)
            result.stats.append(
                CandidateStat(
                    focus=vector.focus,
                    round_limit=limit,
                    length=vector.length,
                    capacity=vector.capacity,
                    outcome=found.outcome,
                )
            )
            if found.selection is None:
                continue

            repo = DetectedRepo(
                focus=vector.focus,
                legs=found.selection.legs,
                round_limit=limit,
                method=found.outcome,
                maturity_days=found.selection.maturity_days,
                implied_rate=found.selection.implied_rate,
            )
            round_claims.claim(repo.transactions)
            detected.append(repo)
            logger.debug(
                "repo_detected",
                focus=repo.focus,
                legs=[str(leg) for leg in repo.legs],
                limit=limit,
                method=repo.method.value,
                implied_rate=repo.implied_rate,
            )

        self.claims.merge(round_claims)
        result.repos.extend(detected)
        return detected

    def _is_intraday(self, vector: CandidateVector) -> bool:
        focus_day = self.ledger.day(vector.focus)
        return all(self.ledger.day(leg.index) == focus_day for leg in vector.legs)


def outcome_summary(result: DetectionResult) -> dict[str, int]:
    """Outcome counts keyed by outcome name, for logging and reporting."""
    return {outcome.value: count for outcome, count in result.outcome_counts().items()}


__all__ = ["FIRST_ROUND_LIMIT", "RoundDriver", "outcome_summary"]
