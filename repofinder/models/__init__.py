"""Pydantic models for ledger and detection data structures."""

from repofinder.models.detection import (
    CandidateStatModel,
    DetectedRepoModel,
    DetectionRequest,
    DetectionResponse,
    DetectionSettings,
)
from repofinder.models.ledger import Ledger, Transaction
from repofinder.models.types import Amount, Identifier

__all__ = [
    # Types
    "Amount",
    "Identifier",
    # Ledger
    "Ledger",
    "Transaction",
    # Detection API
    "DetectionSettings",
    "DetectionRequest",
    "DetectionResponse",
    "DetectedRepoModel",
    "CandidateStatModel",
]
