"""
amount.py - Exact fixed-point amounts

A FixedPointAmount stores a decimal value as a scaled integer so that every
ledger calculation is integer arithmetic. The scale is fixed at 4 decimal
places for the whole package; mixing scales is never possible because no
constructor accepts one.

Conversion from a decimal truncates toward negative infinity (floor), NOT
toward zero:

    FixedPointAmount.from_decimal("1.23456")   -> 1.2345
    FixedPointAmount.from_decimal("-1.23456")  -> -1.2346

The engine only accumulates amounts, so add/subtract/compare is all it needs.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR, InvalidOperation, localcontext
from typing import Union


# Number of decimal places carried by every amount.
SCALE = 4

# 10 ** SCALE, the factor between a decimal value and its scaled integer.
SCALE_FACTOR = 10 ** SCALE

# Scaled values are kept inside the signed 64-bit range.
MIN_SCALED_VALUE = -(2 ** 63)
MAX_SCALED_VALUE = 2 ** 63 - 1

# Decimal exponent of the largest whole part that can still fit (~9.2e14).
MAX_WHOLE_DIGITS = len(str(MAX_SCALED_VALUE)) - SCALE - 1

DecimalLike = Union[Decimal, int, float, str]


def _to_decimal(value: DecimalLike) -> Decimal:
    """Convert supported inputs to Decimal, routing floats through str()."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError("Amount cannot be a bool")
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Invalid decimal amount: {value!r}") from e


@dataclass(frozen=True, slots=True, order=True)
class FixedPointAmount:
    """
    Decimal value represented as an integer count of 10^-SCALE units.

    Attributes:
        scaled_value: The value multiplied by 10^SCALE.

    This class is immutable (frozen=True) and ordered by scaled_value, so
    the comparison operators work directly.
    """
    scaled_value: int = 0

    def __post_init__(self):
        if not isinstance(self.scaled_value, int) or isinstance(self.scaled_value, bool):
            raise ValueError(
                f"FixedPointAmount scaled_value must be int, got {type(self.scaled_value)}"
            )
        if not MIN_SCALED_VALUE <= self.scaled_value <= MAX_SCALED_VALUE:
            raise ValueError(f"FixedPointAmount out of 64-bit range: {self.scaled_value}")

    @classmethod
    def zero(cls) -> FixedPointAmount:
        return cls(0)

    @classmethod
    def from_decimal(cls, value: DecimalLike) -> FixedPointAmount:
        """
        Build an amount from a decimal value, flooring to SCALE places.

        Args:
            value: Decimal, int, str, or float (floats are converted via str()
                   so that 0.1 means exactly 0.1).

        Raises:
            ValueError: If the value is not a finite number or does not fit
                        the 64-bit scaled range.
        """
        d = _to_decimal(value)
        if not d.is_finite():
            raise ValueError(f"Amount must be finite, got {d}")
        if d and d.adjusted() > MAX_WHOLE_DIGITS:
            raise ValueError(f"FixedPointAmount out of 64-bit range: {d}")
        if d and d.adjusted() < -SCALE:
            # |d| < 10^-SCALE floors to zero or to one unit below it.
            return cls(-1 if d < 0 else 0)
        # Exact scaling: the context must carry every input digit.
        with localcontext() as ctx:
            ctx.prec = len(d.as_tuple().digits) + MAX_WHOLE_DIGITS + 2 * SCALE
            scaled = d.scaleb(SCALE).to_integral_value(rounding=ROUND_FLOOR)
        return cls(int(scaled))

    def to_decimal(self) -> Decimal:
        """Exact Decimal value with SCALE places (e.g. Decimal('2.0000'))."""
        return Decimal(self.scaled_value).scaleb(-SCALE).quantize(Decimal(1).scaleb(-SCALE))

    def is_positive(self) -> bool:
        return self.scaled_value > 0

    def __add__(self, other: FixedPointAmount) -> FixedPointAmount:
        if not isinstance(other, FixedPointAmount):
            return NotImplemented
        return FixedPointAmount(self.scaled_value + other.scaled_value)

    def __sub__(self, other: FixedPointAmount) -> FixedPointAmount:
        if not isinstance(other, FixedPointAmount):
            return NotImplemented
        return FixedPointAmount(self.scaled_value - other.scaled_value)

    def __neg__(self) -> FixedPointAmount:
        return FixedPointAmount(-self.scaled_value)

    def __str__(self) -> str:
        return format_amount(self)

    def __repr__(self) -> str:
        return f"FixedPointAmount({format_amount(self)})"


# ============================================================================
# FUNCTIONAL API
# ============================================================================

def add(a: FixedPointAmount, b: FixedPointAmount) -> FixedPointAmount:
    return a + b


def subtract(a: FixedPointAmount, b: FixedPointAmount) -> FixedPointAmount:
    return a - b


def greater_than_zero(a: FixedPointAmount) -> bool:
    return a.is_positive()


def greater_or_equal(a: FixedPointAmount, b: FixedPointAmount) -> bool:
    return a.scaled_value >= b.scaled_value


def format_amount(a: FixedPointAmount) -> str:
    """
    Render an amount with exactly SCALE digits after the decimal point.

    Uses integer division only, so the output never depends on float
    formatting: 20000 -> "2.0000", -5 -> "-0.0005".
    """
    sign = "-" if a.scaled_value < 0 else ""
    whole, frac = divmod(abs(a.scaled_value), SCALE_FACTOR)
    return f"{sign}{whole}.{frac:0{SCALE}d}"
