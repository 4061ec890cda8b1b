from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal("0.01")

# NUMERIC(10, 2): 99,999,999.99
MAX_AMOUNT = Decimal("99999999.99")


def parse_amount(value) -> Decimal:
    """
    Parse a client-supplied amount into an exact Decimal.

    Floats are converted through their shortest repr, so 15.99 becomes
    Decimal("15.99") rather than the binary expansion. Booleans, NaN and
    infinities are rejected with ValueError.
    """
    if isinstance(value, bool):
        raise ValueError("boolean is not an amount")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValueError("empty amount")
        try:
            amount = Decimal(stripped)
        except InvalidOperation:
            raise ValueError(f"not a number: {value!r}")
    else:
        raise ValueError(f"unsupported amount type: {type(value).__name__}")

    if not amount.is_finite():
        raise ValueError("amount must be finite")
    return amount


def quantize(amount: Decimal) -> Decimal:
    """Round to cents. Raises ValueError when the amount has too many digits to round."""
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"amount out of range: {amount}")


def format_amount(amount: Decimal | None) -> str | None:
    if amount is None:
        return None
    return str(quantize(Decimal(amount)))
