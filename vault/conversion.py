"""
conversion.py - Pure share/asset conversion math

Every function takes the current supply and valuation explicitly and returns
an int. Division always floors, so rounding favours the pool over the caller.

    preview_deposit:  assets -> shares
    preview_withdraw: shares -> assets (pre-burn supply)
    price_per_share:  valuation per share, scaled by PRICE_UNIT
"""

from __future__ import annotations
from decimal import Decimal

from .core import (
    AssetAmount, ShareAmount, PRICE_UNIT, ASSET_DECIMALS,
    InvalidAmount, ZeroSupply, ZeroValuation, _is_amount,
)


def require_positive(amount: int, what: str = "amount") -> None:
    """Raise InvalidAmount unless amount is a positive int."""
    if not _is_amount(amount) or amount <= 0:
        raise InvalidAmount(f"{what} must be a positive int, got {amount!r}")


def preview_deposit(amount: AssetAmount, supply: ShareAmount, valuation: AssetAmount) -> ShareAmount:
    """
    Shares minted for depositing `amount`.

    An empty ledger mints 1:1 (bootstrap). With shares outstanding, a zero
    valuation cannot price the deposit and raises ZeroValuation.

    Raises:
        InvalidAmount: If amount is not a positive int
        ZeroValuation: If supply > 0 and valuation == 0
    """
    require_positive(amount)
    if supply == 0:
        return amount
    if valuation == 0:
        raise ZeroValuation(f"cannot price a deposit: supply={supply}, valuation=0")
    return amount * supply // valuation


def preview_withdraw(shares: ShareAmount, supply: ShareAmount, valuation: AssetAmount) -> AssetAmount:
    """
    Asset owed for burning `shares`, using the supply before the burn.

    Raises:
        InvalidAmount: If shares is not a positive int
        ZeroSupply: If no shares are outstanding
    """
    require_positive(shares, "shares")
    if supply == 0:
        raise ZeroSupply("cannot price a withdrawal with zero supply")
    return shares * valuation // supply


def price_per_share(supply: ShareAmount, valuation: AssetAmount, unit: int = PRICE_UNIT) -> int:
    """Valuation per share scaled by `unit`; `unit` itself when nothing is outstanding."""
    if supply == 0:
        return unit
    return valuation * unit // supply


def to_decimal(amount: int, decimals: int = ASSET_DECIMALS) -> Decimal:
    """Render a fixed-point int as a Decimal (e.g. 1500000000000000000 -> 1.5)."""
    return Decimal(amount).scaleb(-decimals)
