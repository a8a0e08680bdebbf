"""
Custom validators for Pydantic models and form input.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Union

from .constants import TRANSACTION_CATEGORIES, TransactionType


def parse_amount(raw: str) -> Decimal:
    """Parse user-entered amount text into a finite Decimal."""
    text = (raw or "").strip().replace(",", "")

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Amount {raw!r} is not a number")

    if not amount.is_finite():
        raise ValueError(f"Amount {raw!r} is not a finite number")

    return amount


def validate_positive_amount(amount: Decimal) -> Decimal:
    """Validate that an amount is strictly greater than zero."""
    if amount <= 0:
        raise ValueError("Amount must be greater than 0")

    return amount


def validate_category(
    transaction_type: Union[TransactionType, str],
    category: str
) -> str:
    """Validate that a category belongs to the set of the given type."""
    allowed = TRANSACTION_CATEGORIES[TransactionType(transaction_type)]

    if category not in allowed:
        raise ValueError(
            f"Category {category!r} is not a valid {TransactionType(transaction_type).value} category"
        )

    return category


def validate_currency_code(code: str) -> str:
    """Validate ISO 4217 style currency code."""
    code = code.strip().upper()

    if not re.match(r'^[A-Z]{3}$', code):
        raise ValueError("Currency code must be 3 letters")

    return code
