"""
Quantity coercion for storage allocation rows
Rows keep the raw text typed by the user; numbers only exist at validation time
"""
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Union
import logging

logger = logging.getLogger(__name__)

# Largest accepted magnitude is 10 ** MAX_QUANTITY_DIGITS - 1
MAX_QUANTITY_DIGITS = 12


def _to_whole_decimal(raw: Union[str, int, float, None]) -> Optional[Decimal]:
    """Finite whole number within MAX_QUANTITY_DIGITS, else None"""
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, int):
        return Decimal(raw) if abs(raw) < 10 ** MAX_QUANTITY_DIGITS else None

    text = str(raw).strip()
    if not text:
        return None

    try:
        value = Decimal(text)
    except InvalidOperation:
        logger.debug(f"Non-numeric quantity: {raw!r}")
        return None

    if not value.is_finite():
        return None

    if value and value.adjusted() >= MAX_QUANTITY_DIGITS:
        logger.debug(f"Quantity out of range: {raw!r}")
        return None

    if value != value.to_integral_value():
        logger.debug(f"Fractional quantity rejected: {raw!r}")
        return None

    return value


def parse_quantity(raw: Union[str, int, None]) -> Optional[int]:
    """
    Parse a row quantity into a positive whole number

    Args:
        raw: Text typed in the quantity field (or an int from upstream data)

    Returns:
        The quantity as int, or None when the value is empty, non-numeric,
        not finite, fractional, out of range, zero or negative
    """
    value = _to_whole_decimal(raw)
    if value is None or value <= 0:
        return None
    return int(value)


def parse_required_quantity(raw: Union[str, int, float, None]) -> Optional[int]:
    """Parse the quantity a material requires: a non-negative whole number, or None"""
    value = _to_whole_decimal(raw)
    if value is None or value < 0:
        return None
    return int(value)


def allocated_total(quantities: Iterable[Union[str, int, None]]) -> int:
    """Sum quantities, counting every invalid entry as 0"""
    return sum(parse_quantity(q) or 0 for q in quantities)
