"""Pydantic models for the settlement ledger.

A transaction delivers `face_value` of `instrument` from `sender` to
`receiver` against `consideration` cash moving the other way. Amounts are
stored unsigned; the engine signs them relative to a focus leg.
"""

import math
from decimal import Decimal

from pydantic import BaseModel, Field

from repofinder.models.types import Amount, Identifier


class Transaction(BaseModel):
    """A single settled securities transaction."""

    sender: Identifier = Field(description="Participant delivering the securities.")
    receiver: Identifier = Field(description="Participant receiving the securities.")
    instrument: Identifier = Field(description="Security identifier (e.g. ISIN).")
    face_value: Amount = Field(alias="faceValue")
    consideration: Amount = Field(
        description="Cash paid by the receiver to the sender.",
    )
    settlement_time: float = Field(
        alias="settlementTime",
        allow_inf_nan=False,
        description="Settlement time; the integer part is the settlement day.",
    )

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def day(self) -> int:
        """Settlement day (integer part of the settlement time)."""
        return math.floor(self.settlement_time)

    @property
    def is_cash_positive(self) -> bool:
        """True if cash actually moves (not a free-of-payment delivery)."""
        return self.consideration > 0

    @property
    def pair(self) -> tuple[str, str, str]:
        """Matching key: (sender, receiver, instrument)."""
        return (self.sender, self.receiver, self.instrument)

    @property
    def reverse_pair(self) -> tuple[str, str, str]:
        """Matching key of a transaction moving in the opposite direction."""
        return (self.receiver, self.sender, self.instrument)


class Ledger(BaseModel):
    """Ordered transaction table, indexed by stable integer position."""

    transactions: list[Transaction] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.transactions)

    def __getitem__(self, index: int) -> Transaction:
        return self.transactions[index]

    def face(self, index: int) -> Decimal:
        return self[index].face_value

    def cash(self, index: int) -> Decimal:
        return self[index].consideration

    def day(self, index: int) -> int:
        return self[index].day

    def time(self, index: int) -> float:
        return self[index].settlement_time
