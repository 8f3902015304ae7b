"""
fake_view.py - Test Helper for LedgerView

Provides a minimal LedgerView implementation for testing read-only consumers
(valuation sources, transfer rules) without requiring a full Ledger instance.
"""

from __future__ import annotations
from datetime import datetime
from typing import Dict, Set, Optional, Any

from vault import LedgerView


class FakeView:
    """
    Minimal LedgerView implementation.

    Example:
        view = FakeView(
            balances={'vault': {'USDC': 1000}},
            time=datetime(2025, 1, 1)
        )

        view.get_balance('vault', 'USDC')   # 1000
        view.get_positions('USDC')          # {'vault': 1000}
    """

    def __init__(
        self,
        balances: Dict[str, Dict[str, int]],
        time: Optional[datetime] = None,
        units: Optional[Dict[str, Any]] = None
    ):
        self._balances = balances
        self._time = time or datetime(2025, 1, 1)
        self._units = units or {}

    @property
    def current_time(self) -> datetime:
        return self._time

    def get_balance(self, wallet: str, unit: str) -> int:
        return self._balances.get(wallet, {}).get(unit, 0)

    def get_positions(self, unit: str) -> Dict[str, int]:
        return {
            w: b[unit]
            for w, b in self._balances.items()
            if unit in b and b[unit] != 0
        }

    def list_wallets(self) -> Set[str]:
        return set(self._balances.keys())

    def get_unit(self, symbol: str) -> Any:
        return self._units[symbol]

