"""
share_ledger.py - Proportional-share conversion engine

ShareLedger converts deposits of a base asset into claim-tokens and back. It
is one engine parameterized by a valuation strategy:

    ObservedValuation  -> self-custodial ledger (NAV = own custody balance)
    ReportedValuation  -> externally-reported ledger (NAV pushed by an Admin),
                          optionally permissioned (deposits need Role.DEPOSITOR)

Every state-mutating call runs inside one contract-wide critical section:
    1. ReentrancyGuard is acquired (a nested call fails with ReentrantCall)
    2. Every Transactional collaborator is snapshotted
    3. The body runs; on any exception every snapshot is restored and the
       exception propagates
    4. The guard is released on every exit path

Rounding always favours the pool: deposits floor the minted shares and
withdrawals floor the owed asset.
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Iterator, List, Optional

from . import conversion
from .access import AccessRegistry
from .core import (
    Principal, AssetAmount, ShareAmount, Role, PRICE_UNIT,
    ClaimToken, CustodyTransport, EventSink, Transactional,
    Unauthorized, InvalidAmount, InsufficientBalance,
    ExternalTransferFailed, OperationNotSupported,
)
from .events import DEPOSIT, PORTFOLIO_VALUE_SET, WHITELISTED, ADMIN_SET
from .guard import ReentrancyGuard
from .valuation import ValuationOracle
from .withdrawals import WithdrawalCoordinator


class ShareLedger:
    """
    The conversion engine.

    Example:
        ledger = ShareLedger(token, custody, ReportedValuation(registry), registry,
                             events, sink="portfolio")
        ledger.set_portfolio_value("admin", 1000)
        ledger.deposit("alice", 100)        # 100 shares (bootstrap 1:1)
        ledger.withdraw("alice", 50)        # burns 50, emits WithdrawalRequest
    """

    def __init__(
        self,
        token: ClaimToken,
        custody: CustodyTransport,
        oracle: ValuationOracle,
        registry: AccessRegistry,
        events: EventSink,
        sink: Optional[Principal] = None,
        permissioned: bool = False,
        price_after_inflow: bool = True,
        name: str = "share_ledger",
        verbose: bool = False,
    ):
        """
        Args:
            token: Claim-token ledger; this engine is its only minter/burner
            custody: Base-asset transport into and out of the ledger's custody
            oracle: Valuation strategy
            registry: Admin and Depositor roles
            events: Notification sink
            sink: Custody sink deposits are forwarded to (None keeps them in custody)
            permissioned: Require Role.DEPOSITOR to deposit
            price_after_inflow: With an observed valuation, price a deposit after
                its own asset has arrived (True) or before it is pulled (False).
                Ignored for reported valuations, which never see the inflow.
            name: Label used in output
            verbose: Print a line per operation
        """
        self.token = token
        self.custody = custody
        self.oracle = oracle
        self.registry = registry
        self.events = events
        self.sink = sink
        self.permissioned = permissioned
        self.price_after_inflow = price_after_inflow
        self.name = name
        self.verbose = verbose
        self.guard = ReentrancyGuard()
        self.withdrawals = WithdrawalCoordinator(events)

    # ========================================================================
    # READS
    # ========================================================================

    @property
    def supports_withdraw(self) -> bool:
        """Withdrawals exist only where the backing asset lives off-ledger."""
        return not self.oracle.observes_custody

    def total_supply(self) -> ShareAmount:
        return self.token.total_supply()

    def total_valuation(self) -> AssetAmount:
        return self.oracle.current_valuation()

    def balance_of(self, principal: Principal) -> ShareAmount:
        return self.token.balance_of(principal)

    @property
    def prices_after_inflow(self) -> bool:
        """True when deposit() reads the valuation after pulling the deposit."""
        return self.oracle.observes_custody and self.price_after_inflow

    def preview_deposit(self, amount: AssetAmount) -> ShareAmount:
        """
        Shares `amount` would mint against the current state.

        When prices_after_inflow is set, deposit() reads the valuation after
        the deposit's own asset has arrived, so this preview overstates the
        result. Use quote_deposit() for the exact figure.
        """
        return conversion.preview_deposit(amount, self.total_supply(), self.total_valuation())

    def quote_deposit(self, amount: AssetAmount) -> ShareAmount:
        """Shares deposit(amount) will actually mint right now."""
        valuation = self.total_valuation()
        if self.prices_after_inflow:
            conversion.require_positive(amount)
            valuation += amount
        return conversion.preview_deposit(amount, self.total_supply(), valuation)

    def preview_withdraw(self, principal: Principal, shares: ShareAmount) -> AssetAmount:
        """
        Asset owed to `principal` for burning `shares`, priced on the pre-burn supply.

        Raises:
            OperationNotSupported: On a self-custodial ledger
            InvalidAmount: If shares is not a positive int
            InsufficientBalance: If shares exceed the principal's balance
            ZeroSupply: If no shares are outstanding
        """
        self._require_withdraw_support()
        conversion.require_positive(shares, "shares")
        held = self.balance_of(principal)
        if shares > held:
            raise InsufficientBalance(f"{principal} holds {held} shares, cannot withdraw {shares}")
        return conversion.preview_withdraw(shares, self.total_supply(), self.total_valuation())

    def price_per_share(self) -> int:
        """Valuation per share scaled by PRICE_UNIT; PRICE_UNIT at zero supply."""
        return conversion.price_per_share(self.total_supply(), self.total_valuation(), PRICE_UNIT)

    # ========================================================================
    # GUARDED CALLS
    # ========================================================================

    def _participants(self) -> List[Transactional]:
        """
        Distinct state holders to capture for a guarded call.

        Book-backed collaborators (the token and the custody) are replaced by
        the book they write to, so a shared book is captured once.
        """
        collaborators = (self.token, self.custody, self.oracle, self.registry, self.events)
        participants: List[Transactional] = []
        for c in collaborators:
            if not isinstance(c, Transactional):
                continue
            book = getattr(c, "book", None)
            holder = book if isinstance(book, Transactional) else c
            if not any(holder is p for p in participants):
                participants.append(holder)
        return participants

    @contextmanager
    def _call(self, operation: str) -> Iterator[None]:
        with self.guard.hold(operation):
            saved = [(p, p.snapshot()) for p in self._participants()]
            try:
                yield
            except Exception as exc:
                for participant, snapshot in reversed(saved):
                    participant.restore(snapshot)
                if self.verbose:
                    print(f"✗ {operation.upper()} reverted: {type(exc).__name__}: {exc}")
                raise

    def _require_withdraw_support(self) -> None:
        if not self.supports_withdraw:
            raise OperationNotSupported(f"{self.name}: withdraw needs a reported valuation")

    def _shares_for(self, amount: AssetAmount) -> ShareAmount:
        shares = self.preview_deposit(amount)
        if shares == 0:
            raise InvalidAmount(f"deposit of {amount} would mint zero shares")
        return shares

    # ========================================================================
    # DEPOSIT / WITHDRAW
    # ========================================================================

    def deposit(self, principal: Principal, amount: AssetAmount) -> ShareAmount:
        """
        Convert `amount` of base asset into shares for `principal`.

        Order of effects:
            shares are priced before anything moves, unless prices_after_inflow
            1. pull amount into custody
            prices_after_inflow: shares are priced now, own inflow included
            2. forward amount to the custody sink, if one is configured
            3. mint shares

        Returns:
            Number of shares minted

        Raises:
            Unauthorized: Permissioned ledger and principal lacks Role.DEPOSITOR
            InvalidAmount: amount is not positive, or would mint zero shares
            ZeroValuation: Shares outstanding but valuation is zero
            ExternalTransferFailed: Custody pull or push failed
            ReentrantCall: Another guarded call is in flight
        """
        with self._call("deposit"):
            if self.permissioned and not self.registry.is_authorized(principal, Role.DEPOSITOR):
                raise Unauthorized(f"{principal} is not whitelisted")
            conversion.require_positive(amount)

            shares = None
            if not self.prices_after_inflow:
                shares = self._shares_for(amount)

            if not self.custody.pull_from(principal, amount):
                raise ExternalTransferFailed(f"could not pull {amount} from {principal}")

            if shares is None:
                shares = self._shares_for(amount)

            if self.sink is not None and not self.custody.push_to(self.sink, amount):
                raise ExternalTransferFailed(f"could not forward {amount} to {self.sink}")

            self.token.mint(principal, shares)
            self.events.emit(DEPOSIT, principal=principal, amount=amount, shares=shares)

        if self.verbose:
            print(f"✓ DEPOSIT {principal}: {amount} -> {shares} shares")
        return shares

    def withdraw(self, principal: Principal, shares: ShareAmount) -> AssetAmount:
        """
        Burn `shares` and emit a withdrawal obligation for off-ledger fulfillment.

        No asset leaves custody here. The owed amount is computed before the
        burn, using the pre-burn supply.

        Returns:
            Asset amount owed to the principal

        Raises:
            OperationNotSupported: On a self-custodial ledger
            InvalidAmount: shares is not positive, or the burn would owe nothing
            InsufficientBalance: shares exceed the principal's balance
            ReentrantCall: Another guarded call is in flight
        """
        with self._call("withdraw"):
            amount = self.preview_withdraw(principal, shares)
            if amount == 0:
                raise InvalidAmount(f"withdrawing {shares} shares would owe nothing")
            self.token.burn(principal, shares)
            self.withdrawals.notify_pending_withdrawal(principal, amount, shares)

        if self.verbose:
            print(f"✓ WITHDRAW {principal}: {shares} shares -> {amount} owed")
        return amount

    # ========================================================================
    # ADMINISTRATION
    # ========================================================================

    def set_portfolio_value(self, actor: Principal, value: AssetAmount) -> None:
        """
        Report the total backing value held off-ledger.

        Raises:
            OperationNotSupported: The valuation is observed, not reported
            Unauthorized: actor is not an Admin
            InvalidValue: value is not strictly positive
        """
        with self._call("set_portfolio_value"):
            set_valuation = getattr(self.oracle, "set_valuation", None)
            if set_valuation is None:
                raise OperationNotSupported(f"{self.name}: valuation is observed, not reported")
            set_valuation(actor, value)
            self.events.emit(PORTFOLIO_VALUE_SET, value=value, actor=actor)

        if self.verbose:
            print(f"✓ PORTFOLIO VALUE {value} (by {actor})")

    def add_to_whitelist(self, actor: Principal, principal: Principal) -> None:
        self._set_whitelisted(actor, principal, True)

    def remove_from_whitelist(self, actor: Principal, principal: Principal) -> None:
        self._set_whitelisted(actor, principal, False)

    def _set_whitelisted(self, actor: Principal, principal: Principal, status: bool) -> None:
        with self._call("whitelist"):
            if not self.permissioned:
                raise OperationNotSupported(f"{self.name}: deposits are not permissioned")
            if status:
                self.registry.grant(actor, principal, Role.DEPOSITOR)
            else:
                self.registry.revoke(actor, principal, Role.DEPOSITOR)
            self.events.emit(WHITELISTED, principal=principal, status=status)

        if self.verbose:
            print(f"✓ WHITELIST {principal}={status} (by {actor})")

    def set_admin(self, actor: Principal, principal: Principal, enabled: bool) -> None:
        """
        Grant or revoke Role.ADMIN.

        An Admin may revoke themselves. If they were the last Admin, no one can
        administer this ledger again.
        """
        with self._call("set_admin"):
            if enabled:
                self.registry.grant(actor, principal, Role.ADMIN)
            else:
                self.registry.revoke(actor, principal, Role.ADMIN)
            self.events.emit(ADMIN_SET, principal=principal, enabled=enabled)

        if self.verbose:
            print(f"✓ ADMIN {principal}={enabled} (by {actor})")

    def __repr__(self):
        return (
            f"ShareLedger({self.name}, supply={self.total_supply()}, "
            f"valuation={self.total_valuation()})"
        )
