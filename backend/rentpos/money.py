from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Any, field: str = "amount") -> Decimal:
    """
    Coerce user/DB input to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not its binary
    expansion. Booleans are rejected even though they subclass int.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        raise ValueError(f"{field} must be a number")
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError(f"{field} must be a number")


def round_cents(value: Decimal) -> Decimal:
    """Presentation rounding only; never feed the result back into math."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_money(value: Optional[Decimal]) -> Optional[str]:
    """Rounded 2-digit string, e.g. Decimal("2.862") -> "2.86"."""
    if value is None:
        return None
    return str(round_cents(value))


def money_str(value: Optional[Decimal]) -> Optional[str]:
    """Full-precision string for API payloads (trailing zeros trimmed)."""
    if value is None:
        return None
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"
