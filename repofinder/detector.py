"""Main detector that orchestrates multi-leg repo detection.

The Detector class is the entry point for finding repos in a ledger. It
builds candidate vectors for every unclaimed focus transaction and hands them
to the round driver, which searches them under widening transaction-count
limits while keeping every transaction in at most one repo.
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from functools import lru_cache

import structlog

from repofinder.config import DEFAULT_DETECTION_CONFIG, DetectionConfig
from repofinder.detection.candidates import build_candidate_vectors
from repofinder.detection.claims import ClaimRegistry
from repofinder.detection.rounds import RoundDriver, outcome_summary
from repofinder.detection.search import CombinationSearch
from repofinder.detection.types import DetectionResult
from repofinder.models.ledger import Ledger

logger = structlog.get_logger()


class Detector:
    """Detect multi-leg repos in a settlement ledger.

    Args:
        config: Detection parameters. If None, uses the defaults.
        search: Combination search to use. If None, exhaustive search
            followed by incremental search (when enabled in the config).
    """

    def __init__(
        self,
        config: DetectionConfig | None = None,
        search: CombinationSearch | None = None,
    ) -> None:
        self.config = config if config is not None else DEFAULT_DETECTION_CONFIG
        self.search = search if search is not None else CombinationSearch()

    def detect(
        self,
        ledger: Ledger,
        claimed: Iterable[int] = (),
        timeout_seconds: float | None = None,
    ) -> DetectionResult:
        """Detect repos in a ledger.

        Args:
            ledger: Transaction table
            claimed: Transactions already assigned by upstream passes
                (intraday and two-leg detection)
            timeout_seconds: Optional wall-clock budget. Checked between
                rounds; the result is marked incomplete if it runs out.

        Returns:
            DetectionResult with detected repos, diagnostics and the final
            claimed set
        """
        claims = ClaimRegistry(claimed)
        if len(ledger) == 0:
            return DetectionResult.empty(claims.snapshot())

        deadline = time.monotonic() + timeout_seconds if timeout_seconds is not None else None
        started = time.monotonic()

        vectors = build_candidate_vectors(ledger, self.config, claims)
        if not vectors:
            logger.debug(
                "no_candidate_vectors",
                transactions=len(ledger),
                claimed=len(claims),
            )
            return DetectionResult.empty(claims.snapshot())

        driver = RoundDriver(ledger, self.config, claims=claims, search=self.search)
        result = driver.run(vectors, deadline=deadline)

        logger.info(
            "detection_completed",
            transactions=len(ledger),
            vectors=len(vectors),
            repos=len(result.repos),
            outcomes=outcome_summary(result),
            completed=result.completed,
            elapsed_seconds=round(time.monotonic() - started, 3),
        )
        return result


@lru_cache(maxsize=1)
def get_default_detector() -> Detector:
    """Return the process-wide detector configured from the environment.

    Configuration is read from REPOFINDER_* variables, see
    DetectionConfig.from_env().
    """
    config = DetectionConfig.from_env()
    logger.info(
        "detector_configured",
        maturity_cap=config.maturity_cap,
        transaction_cap=config.transaction_cap,
        matrix_max=config.matrix_max,
        iter_max=config.iter_max,
        use_iterative=config.use_iterative,
    )
    return Detector(config=config)
