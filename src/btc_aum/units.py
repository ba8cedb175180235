from __future__ import annotations

from decimal import (
    MAX_EMAX,
    MAX_PREC,
    MIN_EMIN,
    ROUND_DOWN,
    ROUND_HALF_EVEN,
    Context,
    Decimal,
    DivisionByZero,
    Inexact,
    InvalidOperation,
    Overflow,
)

from .constants import WBTC_DECIMALS
from .errors import FixedPointOverflowError

# Context for quotients. Wide enough that exchange-sized figures divide
# without meaningful loss; only divisions may round.
AUM_DECIMAL_CONTEXT = Context(
    prec=50,
    rounding=ROUND_HALF_EVEN,
    traps=[InvalidOperation, DivisionByZero, Overflow],
)

# Context for sums and power-of-ten scaling. These must never round; Inexact
# is trapped so any rounding surfaces as an error instead of a wrong total.
EXACT_DECIMAL_CONTEXT = Context(
    prec=MAX_PREC,
    rounding=ROUND_DOWN,
    Emax=MAX_EMAX,
    Emin=MIN_EMIN,
    traps=[InvalidOperation, DivisionByZero, Overflow, Inexact],
)

I128_MIN = -(2**127)
I128_MAX = 2**127 - 1


def to_fixed_point(value: Decimal, decimals: int = WBTC_DECIMALS) -> int:
    """Encode a decimal as an integer count of 10**-decimals units.

    Args:
        value: Full-precision amount.
        decimals: Number of fractional digits kept by the encoding.

    Returns:
        ``value * 10**decimals`` with the fractional part dropped.

    Raises:
        FixedPointOverflowError: If ``value`` is not finite or the result
            falls outside the signed 128-bit range.

    Notes:
        - Truncates toward zero; never rounds half-up, half-even or up.
        - ``scaleb`` only shifts the exponent, so no digits are lost before
          truncation.
    """
    if not value.is_finite():
        raise FixedPointOverflowError(
            "aum_wbtc_u8", f"cannot encode non-finite value {value}"
        )
    scaled = value.scaleb(decimals, context=EXACT_DECIMAL_CONTEXT)
    units = int(scaled.to_integral_value(rounding=ROUND_DOWN))
    if not I128_MIN <= units <= I128_MAX:
        raise FixedPointOverflowError(
            "aum_wbtc_u8", "failed to convert to a signed 128-bit integer"
        )
    return units


def from_fixed_point(units: int, decimals: int = WBTC_DECIMALS) -> Decimal:
    """Decimal view of a fixed-point integer, exactly ``decimals`` places."""
    return Decimal(units).scaleb(-decimals, context=EXACT_DECIMAL_CONTEXT).quantize(
        Decimal(1).scaleb(-decimals), context=EXACT_DECIMAL_CONTEXT
    )
