"""
share.py - Claim-token unit and the ClaimToken adapter over the book

This module provides:
1. create_share_unit() - Factory for the fungible claim-token unit
2. ShareToken - ClaimToken implementation that mints and burns through Ledger.execute()

Minting is a move out of SYSTEM_WALLET, burning is a move back into it. The
share unit carries issuer_transfer_rule, so the book rejects any issuance or
redemption that does not come from the configured minter.
"""

from __future__ import annotations

from ..core import (
    Move, Unit, Principal, ShareAmount,
    ExecuteResult, LedgerError, InvalidAmount, InsufficientBalance,
    SYSTEM_WALLET, UNIT_TYPE_SHARE, ASSET_DECIMALS,
    build_transaction, issuer_transfer_rule, _freeze_state, _is_amount,
)
from ..ledger import Ledger


def create_share_unit(
    symbol: str,
    name: str,
    minter: str,
    decimals: int = ASSET_DECIMALS,
) -> Unit:
    """
    Create the claim-token unit.

    Args:
        symbol: Share symbol (e.g., "vSHARE")
        name: Human-readable name
        minter: contract_id allowed to issue and redeem shares
        decimals: Fixed-point decimals of share amounts

    Returns:
        A Unit with a zero minimum balance and issuer_transfer_rule attached.
    """
    if not minter or not minter.strip():
        raise ValueError("minter cannot be empty")
    return Unit(
        symbol=symbol,
        name=name,
        unit_type=UNIT_TYPE_SHARE,
        min_balance=0,
        decimals=decimals,
        transfer_rule=issuer_transfer_rule,
        _frozen_state=_freeze_state({'issuer': minter}),
    )


class ShareToken:
    """
    Fungible claim-token ledger kept in the book.

    Example:
        token = ShareToken(book, "vSHARE", minter="share_ledger")
        token.mint("alice", 100)
        token.balance_of("alice")   # 100
        token.total_supply()        # 100
    """

    def __init__(self, book: Ledger, symbol: str, minter: str):
        self.book = book
        self.symbol = symbol
        self.minter = minter

    def _require_amount(self, amount: ShareAmount) -> None:
        if not _is_amount(amount) or amount <= 0:
            raise InvalidAmount(f"share amount must be a positive int, got {amount!r}")

    def mint(self, to: Principal, amount: ShareAmount) -> None:
        """Issue `amount` shares to `to`."""
        self._require_amount(amount)
        self.book.ensure_wallet(to)
        tx = build_transaction(self.book, [
            Move(amount, self.symbol, SYSTEM_WALLET, to, self.minter)
        ], memo="mint")
        if self.book.execute(tx) != ExecuteResult.APPLIED:
            raise LedgerError(f"mint of {amount} {self.symbol} to {to} rejected")

    def burn(self, from_: Principal, amount: ShareAmount) -> None:
        """Redeem `amount` shares held by `from_`."""
        self._require_amount(amount)
        held = self.balance_of(from_)
        if amount > held:
            raise InsufficientBalance(
                f"{from_} holds {held} {self.symbol}, cannot burn {amount}"
            )
        tx = build_transaction(self.book, [
            Move(amount, self.symbol, from_, SYSTEM_WALLET, self.minter)
        ], memo="burn")
        if self.book.execute(tx) != ExecuteResult.APPLIED:
            raise InsufficientBalance(f"burn of {amount} {self.symbol} from {from_} rejected")

    def balance_of(self, principal: Principal) -> ShareAmount:
        if not self.book.is_registered(principal):
            return 0
        return self.book.get_balance(principal, self.symbol)

    def total_supply(self) -> ShareAmount:
        return self.book.outstanding(self.symbol)

    def snapshot(self) -> Ledger:
        return self.book.snapshot()

    def restore(self, snapshot: Ledger) -> None:
        self.book.restore(snapshot)

    def __repr__(self):
        return f"ShareToken({self.symbol}, supply={self.total_supply()})"
