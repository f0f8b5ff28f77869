"""Fixed-point conversions between ledger base units and decimal amounts.

Amounts on the ledger are unsigned integers scaled by ``10 ** decimals``;
yield rates are integers in basis points. The two are unrelated scales and
are converted by separate functions.
"""
from __future__ import annotations

from decimal import Decimal, DecimalException, InvalidOperation, getcontext, localcontext
from typing import Any

from .errors import InvalidAmountError

BASIS_POINTS_PER_PERCENT = 100

# Ledger amounts are uint256.
MAX_UINT256 = 2**256 - 1
_MAX_UINT256_DIGITS = len(str(MAX_UINT256))

# Enough significant digits for any uint256 (78 digits) plus the scale.
_MIN_PRECISION = 100


def _exact_context(digits: int, decimals: int):
    ctx = getcontext().copy()
    ctx.prec = max(_MIN_PRECISION, digits + abs(decimals) + 2)
    return localcontext(ctx)


def to_decimal(raw: int, decimals: int) -> Decimal:
    """Convert a base-unit integer to its decimal value.

    >>> to_decimal(50_000_000, 6)
    Decimal('50.000000')
    """
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise InvalidAmountError(f"Base-unit amount must be an integer, got {raw!r}")
    if raw < 0:
        raise InvalidAmountError(f"Base-unit amount must not be negative, got {raw}")

    with _exact_context(len(str(raw)), decimals):
        value = Decimal(raw).scaleb(-decimals)
    return value


def as_decimal(value: Any) -> Decimal:
    """Coerce an int, float, str or Decimal to Decimal; anything else is invalid."""
    if isinstance(value, bool):
        raise InvalidAmountError(f"Amount must be numeric, got {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        # repr() gives the shortest string that round-trips, so 50.1 stays 50.1
        return Decimal(repr(value))
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation as exc:
            raise InvalidAmountError(f"Amount must be numeric, got {value!r}") from exc
    raise InvalidAmountError(f"Amount must be numeric, got {value!r}")


def to_base_unit(value: Any, decimals: int) -> int:
    """Convert a decimal amount to base units without rounding.

    Raises:
        InvalidAmountError: the value is negative, not finite, not numeric,
            has more fractional digits than ``decimals``, or does not fit in
            a uint256 once scaled.
    """
    amount = as_decimal(value)
    if not amount.is_finite():
        raise InvalidAmountError(f"Amount must be finite, got {value!r}")
    if amount < 0:
        raise InvalidAmountError(f"Amount must not be negative, got {value!r}")
    if not amount:
        return 0
    # Checked on the exponent before scaling so "1e990000" never becomes an int.
    magnitude = amount.adjusted() + decimals
    if magnitude >= _MAX_UINT256_DIGITS:
        raise InvalidAmountError(f"Amount {value!r} exceeds the uint256 range")
    if magnitude < 0:
        raise InvalidAmountError(f"Amount {value!r} has more than {decimals} decimal places")

    try:
        with _exact_context(len(amount.as_tuple().digits), decimals):
            scaled = amount.scaleb(decimals)
            integral = scaled == scaled.to_integral_value()
    except DecimalException as exc:
        raise InvalidAmountError(f"Amount {value!r} cannot be scaled") from exc
    if not integral:
        raise InvalidAmountError(f"Amount {value!r} has more than {decimals} decimal places")

    raw = int(scaled)
    if raw > MAX_UINT256:
        raise InvalidAmountError(f"Amount {value!r} exceeds the uint256 range")
    return raw


def bps_to_percent(bps: int) -> Decimal:
    """Basis points to a percentage: 1250 -> 12.5."""
    return Decimal(int(bps)) / BASIS_POINTS_PER_PERCENT
