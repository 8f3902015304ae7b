"""
valuation.py - Total backing value (NAV) sources for the share ledger

Provides the valuation strategies the share engine is parameterized by.

Classes:
- ValuationOracle: Protocol defining the valuation interface
- ObservedValuation: NAV is the asset balance held in the ledger's own custody
- ReportedValuation: NAV is a figure pushed by an Admin, for assets held off-ledger

All valuations are returned as ints in base-asset units.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple, runtime_checkable

from .access import AccessRegistry
from .core import (
    LedgerView, Principal, AssetAmount, Role,
    Unauthorized, InvalidValue, _is_amount,
)


@runtime_checkable
class ValuationOracle(Protocol):
    """
    Protocol for valuation sources.

    observes_custody tells the engine whether the figure moves with the
    ledger's own custody balance. When it does, a deposit's share count is
    computed after the deposit's asset has arrived.
    """
    observes_custody: bool

    def current_valuation(self) -> AssetAmount:
        """Total backing value attributed to all outstanding shares."""
        ...


class ObservedValuation:
    """
    Valuation read live from the custody wallet's asset balance.

    Always consistent with actual holdings and cannot be set by anyone,
    but cannot see assets held off-ledger.
    """

    observes_custody = True

    def __init__(self, view: LedgerView, wallet: Principal, asset_symbol: str):
        """
        Args:
            view: Read-only access to the book holding the asset
            wallet: The ledger's custody wallet
            asset_symbol: Base-asset unit symbol
        """
        self.view = view
        self.wallet = wallet
        self.asset_symbol = asset_symbol

    def current_valuation(self) -> AssetAmount:
        return self.view.get_balance(self.wallet, self.asset_symbol)

    def __repr__(self):
        return f"ObservedValuation({self.asset_symbol}@{self.wallet})"


@dataclass(frozen=True, slots=True)
class ValuationReport:
    """One accepted valuation write."""
    sequence: int
    value: AssetAmount
    reported_by: Principal


class ReportedValuation:
    """
    Valuation pushed in by an Admin, representing assets held off-site.

    The figure is 0 until the first report. Every accepted report is kept in
    `history`, oldest first.
    """

    observes_custody = False

    def __init__(self, registry: AccessRegistry):
        self.registry = registry
        self.history: List[ValuationReport] = []

    @property
    def value(self) -> AssetAmount:
        return self.history[-1].value if self.history else 0

    @property
    def last_set_by(self) -> Optional[Principal]:
        return self.history[-1].reported_by if self.history else None

    def current_valuation(self) -> AssetAmount:
        return self.value

    def set_valuation(self, actor: Principal, new_value: AssetAmount) -> ValuationReport:
        """
        Overwrite the reported valuation.

        Raises:
            Unauthorized: If actor is not an Admin
            InvalidValue: If new_value is not a strictly positive int
        """
        if not self.registry.is_authorized(actor, Role.ADMIN):
            raise Unauthorized(f"{actor} cannot report valuations")
        if not _is_amount(new_value) or new_value <= 0:
            raise InvalidValue(f"valuation must be a positive int, got {new_value!r}")
        report = ValuationReport(len(self.history), new_value, actor)
        self.history.append(report)
        return report

    def snapshot(self) -> Tuple[ValuationReport, ...]:
        return tuple(self.history)

    def restore(self, snapshot: Tuple[ValuationReport, ...]) -> None:
        self.history = list(snapshot)

    def __repr__(self):
        return f"ReportedValuation(value={self.value}, reports={len(self.history)})"
