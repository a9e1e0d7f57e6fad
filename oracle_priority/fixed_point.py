"""
Fixed-point conversions for oracle prices.

Prices are held as decimal.Decimal in natural units and persisted as a
WAD-scaled integer (18 fractional digits) that must fit an unsigned
128-bit slot. Token quantities arrive in subunits (lamports) and are
divided by LAMPORTS_PER_SOL.

All arithmetic runs in a widened decimal context so that no intermediate
result is rounded before the final truncation.
"""

from decimal import Context, Decimal, Overflow, ROUND_DOWN, localcontext
from typing import Union

from .errors import FixedPointOverflowError

# A wad is a decimal number with 18 digits of precision
WAD_DECIMALS = 18
WAD = 10 ** WAD_DECIMALS

LAMPORTS_PER_SOL = 1_000_000_000

U64_MAX = 2 ** 64 - 1
U128_MAX = 2 ** 128 - 1

# Enough digits for a u128 numerator with 18 fractional digits plus headroom
_PRECISION = 80

# Smallest decimal whose compact form no longer fits u128
COMPACT_LIMIT = Decimal(U128_MAX + 1).scaleb(-WAD_DECIMALS, Context(prec=_PRECISION))

Number = Union[Decimal, int, str]


def _as_decimal(value: Number) -> Decimal:
    if isinstance(value, float):
        raise TypeError("Binary floats are not accepted; pass a Decimal, int or str")
    if isinstance(value, Decimal):
        return value
    return Decimal(value)


def to_compact(value: Number) -> int:
    """
    Convert a decimal price to its compact on-disk integer.

    Multiplies by 10^18 and truncates toward zero. The range check runs
    on the unscaled value, so arbitrarily large exponents never reach
    the multiplication.

    Raises:
        FixedPointOverflowError: If the value is negative, not finite,
            or scales past the u128 range.
    """
    value = _as_decimal(value)
    if not value.is_finite():
        raise FixedPointOverflowError(f"Cannot store non-finite value {value}")

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        if value < 0 or value >= COMPACT_LIMIT:
            raise FixedPointOverflowError(
                f"Value {value} outside storable range [0, {COMPACT_LIMIT})"
            )
        scaled = value.scaleb(WAD_DECIMALS).to_integral_value(rounding=ROUND_DOWN)

    return int(scaled)


def from_compact(stored: int) -> Decimal:
    """Convert a compact integer back to a decimal price (exact)."""
    if stored < 0 or stored > U128_MAX:
        raise FixedPointOverflowError(f"Stored value {stored} outside u128 range")
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(stored).scaleb(-WAD_DECIMALS)


def from_subunit_offset(subunits: int) -> Decimal:
    """Convert a lamport quantity into whole-token units."""
    if subunits < 0 or subunits > U64_MAX:
        raise FixedPointOverflowError(f"Subunit amount {subunits} outside u64 range")
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(subunits) / subunits_per_unit()


def subunits_per_unit() -> Decimal:
    return Decimal(LAMPORTS_PER_SOL)


def from_mantissa_exponent(mantissa: int, exponent: int) -> Decimal:
    """
    Build a decimal from a (price, expo) pair.

    Pyth reports e.g. price=6512345, expo=-5 for 65.12345.
    """
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        try:
            return Decimal(mantissa).scaleb(exponent)
        except Overflow as e:
            raise FixedPointOverflowError(
                f"Price {mantissa}e{exponent} exceeds the decimal range"
            ) from e
