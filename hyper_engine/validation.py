"""Input validation for addresses and request amounts."""
from __future__ import annotations

from decimal import Decimal
from typing import Any

from web3 import Web3

from .errors import InvalidAmountError, ValidationError
from .units import as_decimal


def validate_address(value: Any, field: str = "address") -> str:
    """Return the checksummed form of ``value`` or raise ``ValidationError``.

    All-lowercase and all-uppercase hex are accepted; mixed case must carry a
    correct EIP-55 checksum.
    """
    if not isinstance(value, str) or not value or not Web3.is_address(value):
        raise ValidationError(f"Valid {field} required", details=f"got {value!r}")
    return Web3.to_checksum_address(value)


def parse_amount(value: Any, field: str = "amount") -> Decimal:
    """Parse a JSON/query amount into a finite Decimal."""
    if value is None:
        raise ValidationError(f"{field} is required")
    try:
        amount = as_decimal(value)
    except InvalidAmountError as exc:
        raise ValidationError(f"{field} must be a number", details=exc.message) from exc
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number", details=f"got {value!r}")
    return amount


def validate_deposit_amount(value: Any, minimum: int) -> Decimal:
    amount = parse_amount(value)
    if amount < minimum:
        raise ValidationError(
            f"Minimum deposit is {minimum} USDC", details=f"got {value!r}"
        )
    return amount


def validate_withdraw_amount(value: Any) -> Decimal | None:
    """``None`` means "withdraw the full principal"."""
    if value is None:
        return None
    amount = parse_amount(value)
    if amount <= 0:
        raise ValidationError("Withdraw amount must be positive", details=f"got {value!r}")
    return amount
