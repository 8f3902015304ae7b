"""
reporter.py - Read-only price facade for dashboards and integrators

Always recomputes from the share ledger's current state; nothing is cached.
"""

from __future__ import annotations
from decimal import Decimal

from . import conversion
from .core import Principal, AssetAmount, ASSET_DECIMALS
from .share_ledger import ShareLedger


class PriceReporter:
    """
    Example:
        reporter = PriceReporter(ledger)
        reporter.price_per_share()            # 1100000000000000000
        reporter.price_per_share_decimal()    # == Decimal('1.1')
    """

    def __init__(self, ledger: ShareLedger, decimals: int = ASSET_DECIMALS):
        self._ledger = ledger
        self.decimals = decimals

    def price_per_share(self) -> int:
        return self._ledger.price_per_share()

    def price_per_share_decimal(self) -> Decimal:
        return conversion.to_decimal(self.price_per_share(), self.decimals)

    def share_value(self, principal: Principal) -> AssetAmount:
        """Asset value of everything `principal` holds, rounded down."""
        held = self._ledger.balance_of(principal)
        if held == 0:
            return 0
        return conversion.preview_withdraw(
            held, self._ledger.total_supply(), self._ledger.total_valuation()
        )

    def __repr__(self):
        return f"PriceReporter({self.price_per_share_decimal()})"
