"""Multi-leg repo detection stages.

**Pipeline (per candidate vector):**
    1. build_candidate_vectors - focus legs and their plausible legs
    2. reduce_vector - strip legs that can never balance
    3. CombinationSearch - ExhaustiveSearch, then IncrementalSearch
    4. filter_feasible - interest band and shortest-maturity tie-break

RoundDriver runs the pipeline under widening transaction-count limits and
resolves conflicts between vectors competing for the same transactions.
"""

from repofinder.detection.candidates import build_candidate_vectors, screen_candidates
from repofinder.detection.claims import ClaimConflict, ClaimRegistry
from repofinder.detection.interest import (
    CashFlow,
    FeasibleSelection,
    filter_feasible,
    implied_rate,
    present_value,
)
from repofinder.detection.reducer import reduce_vector
from repofinder.detection.rounds import RoundDriver
from repofinder.detection.search import (
    CombinationSearch,
    ExhaustiveSearch,
    IncrementalSearch,
    SearchResult,
    SearchStrategy,
    SelectionChecker,
)
from repofinder.detection.types import (
    CandidateStat,
    CandidateVector,
    DetectedRepo,
    DetectionResult,
    Leg,
    Outcome,
)

__all__ = [
    # Types
    "CandidateStat",
    "CandidateVector",
    "DetectedRepo",
    "DetectionResult",
    "Leg",
    "Outcome",
    # Claims
    "ClaimConflict",
    "ClaimRegistry",
    # Stages
    "build_candidate_vectors",
    "screen_candidates",
    "reduce_vector",
    "CombinationSearch",
    "ExhaustiveSearch",
    "IncrementalSearch",
    "SearchResult",
    "SearchStrategy",
    "SelectionChecker",
    "CashFlow",
    "FeasibleSelection",
    "filter_feasible",
    "implied_rate",
    "present_value",
    "RoundDriver",
]
