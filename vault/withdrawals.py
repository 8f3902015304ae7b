"""
withdrawals.py - Hand-off of burned shares to off-ledger fulfillment

A withdrawal on a reported-valuation ledger does not move any asset. The
shares are burned and a WithdrawalRequest event is appended to the stream;
an external process reads it and pays the principal from off-ledger holdings.

This is the system's trust boundary. There is no escrow, no timeout and no
retry: a burned share is an IOU whose payment depends on whoever reads the
stream.
"""

from __future__ import annotations
from typing import List

from .core import Principal, AssetAmount, ShareAmount, EventSink, OperationNotSupported
from .events import Event, EventLog, WITHDRAWAL_REQUEST


class WithdrawalCoordinator:
    """Turns a completed burn into a pending obligation notice."""

    def __init__(self, events: EventSink):
        self.events = events

    def notify_pending_withdrawal(
        self,
        principal: Principal,
        amount: AssetAmount,
        shares: ShareAmount,
    ) -> Event:
        return self.events.emit(
            WITHDRAWAL_REQUEST,
            principal=principal,
            amount=amount,
            shares=shares,
        )

    def pending(self, cursor: int = 0) -> List[Event]:
        """
        WithdrawalRequest events at or after `cursor`.

        This reads the stream; it is not a table of unpaid obligations. Whether
        a request has been fulfilled is known only to the fulfilling process.

        Raises:
            OperationNotSupported: If the sink is not a readable EventLog
        """
        if not isinstance(self.events, EventLog):
            raise OperationNotSupported(
                f"cannot read requests back from {type(self.events).__name__}"
            )
        return self.events.read(cursor, name=WITHDRAWAL_REQUEST)
