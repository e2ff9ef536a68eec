"""Pydantic models for the detection request/response data structures."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from repofinder.config import DEFAULT_DETECTION_CONFIG, DetectionConfig
from repofinder.detection.types import (
    CandidateStat,
    DetectedRepo,
    DetectionResult,
    Leg,
    Outcome,
)
from repofinder.models.ledger import Ledger, Transaction


class LegRole(str, Enum):
    """Role of a leg relative to the repo's focus leg."""

    SAME = "same"  # Moves cash like the focus (opening or rolling leg)
    REVERSE = "reverse"  # Moves cash back (repayment leg)


class DetectionSettings(BaseModel):
    """Detection parameters accepted over the API.

    Mirrors DetectionConfig; validation errors surface as 422 responses.
    """

    maturity_cap: int = Field(default=DEFAULT_DETECTION_CONFIG.maturity_cap, alias="maturityCap")
    transaction_cap: int = Field(
        default=DEFAULT_DETECTION_CONFIG.transaction_cap, alias="transactionCap"
    )
    interest_lower: float = Field(
        default=DEFAULT_DETECTION_CONFIG.interest_lower, alias="interestLower"
    )
    interest_upper: float = Field(
        default=DEFAULT_DETECTION_CONFIG.interest_upper, alias="interestUpper"
    )
    matrix_max: int = Field(default=DEFAULT_DETECTION_CONFIG.matrix_max, alias="matrixMax")
    iter_max: int = Field(default=DEFAULT_DETECTION_CONFIG.iter_max, alias="iterMax")
    use_iterative: bool = Field(
        default=DEFAULT_DETECTION_CONFIG.use_iterative, alias="useIterative"
    )

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _check_config(self) -> "DetectionSettings":
        # ConfigError is a ValueError, so pydantic reports it as a validation error
        self.to_config()
        return self

    def to_config(self) -> DetectionConfig:
        return DetectionConfig(
            maturity_cap=self.maturity_cap,
            transaction_cap=self.transaction_cap,
            interest_lower=self.interest_lower,
            interest_upper=self.interest_upper,
            matrix_max=self.matrix_max,
            iter_max=self.iter_max,
            use_iterative=self.use_iterative,
        )


class DetectionRequest(BaseModel):
    """A ledger to search for multi-leg repos."""

    transactions: list[Transaction] = Field(default_factory=list)
    claimed: list[int] = Field(
        default_factory=list,
        description="Indices already assigned by intraday and two-leg detection.",
    )
    settings: DetectionSettings | None = None
    deadline: datetime | None = Field(
        default=None,
        description="Time by which a response is expected.",
    )

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _check_claimed(self) -> "DetectionRequest":
        for index in self.claimed:
            if not 0 <= index < len(self.transactions):
                raise ValueError(f"Claimed index out of range: {index}")
        return self

    @property
    def ledger(self) -> Ledger:
        return Ledger(transactions=self.transactions)


class LegModel(BaseModel):
    """A transaction taking part in a detected repo."""

    index: int
    role: LegRole

    @classmethod
    def from_leg(cls, leg: Leg) -> "LegModel":
        return cls(index=leg.index, role=LegRole.REVERSE if leg.reverse else LegRole.SAME)


class DetectedRepoModel(BaseModel):
    """A detected repo as returned by the API."""

    focus: int
    legs: list[LegModel]
    round_limit: int = Field(alias="roundLimit")
    method: Outcome
    maturity_days: int = Field(alias="maturityDays")
    implied_rate: float = Field(alias="impliedRate")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_repo(cls, repo: DetectedRepo) -> "DetectedRepoModel":
        return cls(
            focus=repo.focus,
            legs=[LegModel.from_leg(leg) for leg in repo.legs],
            round_limit=repo.round_limit,
            method=repo.method,
            maturity_days=repo.maturity_days,
            implied_rate=repo.implied_rate,
        )


class CandidateStatModel(BaseModel):
    """Diagnostics for one searched candidate vector."""

    focus: int
    round_limit: int = Field(alias="roundLimit")
    length: int
    capacity: int
    outcome: Outcome

    model_config = {"populate_by_name": True}

    @classmethod
    def from_stat(cls, stat: CandidateStat) -> "CandidateStatModel":
        return cls(
            focus=stat.focus,
            round_limit=stat.round_limit,
            length=stat.length,
            capacity=stat.capacity,
            outcome=stat.outcome,
        )


class DetectionResponse(BaseModel):
    """The response from the detector's /detect endpoint."""

    repos: list[DetectedRepoModel] = Field(default_factory=list)
    stats: list[CandidateStatModel] = Field(default_factory=list)
    outcomes: dict[Outcome, int] = Field(default_factory=dict)
    claimed: list[int] = Field(default_factory=list)
    completed: bool = True

    model_config = {"populate_by_name": True}

    @classmethod
    def from_result(cls, result: DetectionResult) -> "DetectionResponse":
        return cls(
            repos=[DetectedRepoModel.from_repo(repo) for repo in result.repos],
            stats=[CandidateStatModel.from_stat(stat) for stat in result.stats],
            outcomes=result.outcome_counts(),
            claimed=sorted(result.claimed),
            completed=result.completed,
        )

    @classmethod
    def empty(cls, completed: bool = True) -> "DetectionResponse":
        """Create an empty response (no repos detected)."""
        return cls(completed=completed)
