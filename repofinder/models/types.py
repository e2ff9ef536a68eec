"""Shared type definitions for ledger models."""

from decimal import Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import BeforeValidator, Field


def validate_amount(value: Any) -> Decimal:
    """Validate that a value is a finite, non-negative amount.

    Args:
        value: Value to validate (Decimal, int, float or decimal string)

    Returns:
        The amount as a Decimal

    Raises:
        ValueError: If value is not a finite non-negative number
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be numeric, got bool")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        # Go through str so 0.1 stays 0.1 rather than its binary expansion
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value)
        except InvalidOperation as err:
            raise ValueError(f"Amount must be a decimal string: '{value}'") from err
    else:
        raise ValueError(f"Amount must be numeric or string, got {type(value).__name__}")

    if not amount.is_finite():
        raise ValueError(f"Amount must be finite: {value}")
    if amount < 0:
        raise ValueError(f"Amount cannot be negative: {value}")

    return amount


# Non-negative decimal amount (face value or cash consideration)
Amount = Annotated[
    Decimal,
    BeforeValidator(validate_amount),
    Field(description="Non-negative decimal amount"),
]

# Participant or instrument identifier
Identifier = Annotated[str, Field(min_length=1)]
