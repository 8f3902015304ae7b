"""
asset.py - Base-asset unit and the CustodyTransport adapter over the book

This module provides:
1. create_asset_unit() - Factory for the base asset (e.g., a stablecoin)
2. issue_asset() - Fund a wallet from SYSTEM_WALLET (proper issuance)
3. AssetCustody - CustodyTransport that moves the asset in and out of the
   ledger's own custody wallet

Transport failures are reported as False, never raised, so the caller decides
how to abort.
"""

from __future__ import annotations

from ..core import (
    Move, Unit, Principal, AssetAmount,
    ExecuteResult, InvalidAmount,
    SYSTEM_WALLET, UNIT_TYPE_ASSET, ASSET_DECIMALS,
    build_transaction, _is_amount,
)
from ..ledger import Ledger


def create_asset_unit(symbol: str, name: str, decimals: int = ASSET_DECIMALS) -> Unit:
    """
    Create a base-asset unit.

    Args:
        symbol: Asset code (e.g., "USDC")
        name: Full name of the asset
        decimals: Fixed-point decimals of asset amounts (default: 18)

    Returns:
        A Unit that cannot be overdrawn in any non-system wallet.
    """
    return Unit(
        symbol=symbol,
        name=name,
        unit_type=UNIT_TYPE_ASSET,
        min_balance=0,
        decimals=decimals,
    )


def issue_asset(book: Ledger, principal: Principal, amount: AssetAmount, symbol: str) -> ExecuteResult:
    """
    Fund `principal` with `amount` of the base asset out of SYSTEM_WALLET.

    Registers the wallet if needed.
    """
    if not _is_amount(amount) or amount <= 0:
        raise InvalidAmount(f"issue amount must be a positive int, got {amount!r}")
    book.ensure_wallet(principal)
    tx = build_transaction(book, [
        Move(amount, symbol, SYSTEM_WALLET, principal, "issuance")
    ], memo="issue")
    return book.execute(tx)


class AssetCustody:
    """
    Moves the base asset between principals and the ledger's custody wallet.

    Example:
        custody = AssetCustody(book, "USDC", custody_wallet="vault")
        custody.pull_from("alice", 100)          # alice -> vault
        custody.push_to("portfolio", 100)        # vault -> portfolio
        custody.held()                           # 0
    """

    def __init__(self, book: Ledger, symbol: str, custody_wallet: Principal, contract_id: str = "custody"):
        self.book = book
        self.symbol = symbol
        self.custody_wallet = book.ensure_wallet(custody_wallet)
        self.contract_id = contract_id

    def _transfer(self, source: Principal, dest: Principal, amount: AssetAmount, memo: str) -> bool:
        if not _is_amount(amount) or amount <= 0:
            return False
        if not self.book.is_registered(source) or source == dest:
            return False
        tx = build_transaction(self.book, [
            Move(amount, self.symbol, source, dest, self.contract_id)
        ], memo=memo)
        return self.book.execute(tx) == ExecuteResult.APPLIED

    def pull_from(self, principal: Principal, amount: AssetAmount) -> bool:
        """Move `amount` from `principal` into custody. False on any failure."""
        return self._transfer(principal, self.custody_wallet, amount, "pull")

    def push_to(self, destination: Principal, amount: AssetAmount) -> bool:
        """Move `amount` out of custody to `destination`. False on any failure."""
        self.book.ensure_wallet(destination)
        return self._transfer(self.custody_wallet, destination, amount, "push")

    def held(self) -> AssetAmount:
        """Asset balance currently held in the custody wallet."""
        return self.book.get_balance(self.custody_wallet, self.symbol)

    def snapshot(self) -> Ledger:
        return self.book.snapshot()

    def restore(self, snapshot: Ledger) -> None:
        self.book.restore(snapshot)

    def __repr__(self):
        return f"AssetCustody({self.symbol}@{self.custody_wallet}, held={self.held()})"
