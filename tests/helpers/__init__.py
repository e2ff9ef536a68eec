"""Test helpers module for shared test utilities.

- constants: Participants, instruments and interest bands
- factories: Transaction, ledger, config and vector factory functions
"""

from tests.helpers.constants import BANK_A, BANK_B, BANK_C, BUND, OAT
from tests.helpers.factories import (
    abc_ledger,
    make_config,
    make_ledger,
    make_transaction,
    make_vector,
)

__all__ = [
    # Constants
    "BANK_A",
    "BANK_B",
    "BANK_C",
    "BUND",
    "OAT",
    # Factories
    "abc_ledger",
    "make_config",
    "make_ledger",
    "make_transaction",
    "make_vector",
]
