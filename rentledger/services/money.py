"""Money helpers and the rounding policy used by every billing computation.

Amounts are Decimal throughout. Intermediate products (unit x rate) are
rounded to cents, invoice totals to whole currency units, both half away
from zero:

    >>> round2(Decimal("206") * Decimal("6.5"))
    Decimal('1339.00')
    >>> round_int(Decimal("2.5"))
    Decimal('3')
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from rentledger.services.errors import InvalidInput

ZERO = Decimal("0")
CENTS = Decimal("0.01")
UNITS = Decimal("1")


def to_decimal(value, field: str = "value") -> Decimal:
    """Convert int/str/float/Decimal input to Decimal.

    Floats go through ``str()`` so that 6.5 becomes Decimal('6.5') rather
    than its binary expansion.

    Raises:
        InvalidInput: If value is None, boolean, or not a finite number
    """
    if value is None or isinstance(value, bool):
        raise InvalidInput(f"{field} is required")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise InvalidInput(f"{field} is not a number: {value!r}") from e
    if not result.is_finite():
        raise InvalidInput(f"{field} is not a finite number: {value!r}")
    return result


def non_negative(value, field: str = "value") -> Decimal:
    """Convert to Decimal and reject negatives."""
    result = to_decimal(value, field)
    if result < ZERO:
        raise InvalidInput(f"{field} must be non-negative, got {result}")
    return result


def round2(value: Decimal) -> Decimal:
    """Round to cents, half away from zero."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def round_int(value: Decimal) -> Decimal:
    """Round to whole currency units, half away from zero."""
    return value.quantize(UNITS, rounding=ROUND_HALF_UP)


def clamp_zero(value: Decimal) -> Decimal:
    return value if value > ZERO else ZERO


__all__ = ["ZERO", "to_decimal", "non_negative", "round2", "round_int", "clamp_zero"]
