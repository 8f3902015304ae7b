"""
Core types and pure functions for the proportional-share ledger.

This module provides the foundational data structures and protocols:
1. Protocols: LedgerView for read-only book access, plus the collaborator
   interfaces the share engine talks to (ClaimToken, CustodyTransport,
   EventSink, Transactional)
2. Immutable data structures: Move, PendingTransaction, Transaction, Unit
3. Exceptions: LedgerError and the domain error taxonomy
4. Type aliases: Principal, AssetAmount, ShareAmount, Positions
5. Transfer rules: pure validation functions for moves
6. Configuration: VaultConfig

All amounts are non-negative Python ints in base units (18-decimal fixed point).
Nothing in this module mutates ledger state.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import (
    Dict, List, Set, Optional, Callable, Any, Protocol,
    Tuple, FrozenSet, runtime_checkable
)


# ============================================================================
# CONSTANTS
# ============================================================================

# Reserved wallet for issuance and redemption.
# The system wallet is exempt from balance validation and can hold any balance.
SYSTEM_WALLET = "system"

# Unit type constants (strings, not enum).
UNIT_TYPE_ASSET = "ASSET"
UNIT_TYPE_SHARE = "SHARE"

# Base-asset and share amounts are fixed point with this many decimals.
ASSET_DECIMALS = 18

# Scaling unit for price-per-share. Also the identity price at zero supply.
PRICE_UNIT = 10 ** ASSET_DECIMALS


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Opaque account identity; doubles as the wallet id in the book.
Principal = str

# Base-asset units.
AssetAmount = int

# Claim-token units.
ShareAmount = int

# Mapping from wallet ID to quantity held by that wallet for a specific unit.
Positions = Dict[str, int]

# Internal state for a unit.
UnitState = Dict[str, Any]


# ============================================================================
# ENUMS
# ============================================================================

class ExecuteResult(Enum):
    """
    Outcome of a transaction execution attempt.

    APPLIED: Transaction was validated and applied to the book.
    REJECTED: Transaction failed validation (balance constraints,
              transfer rules, unregistered wallets or units).
    """
    APPLIED = "applied"
    REJECTED = "rejected"


class Role(Enum):
    """
    Privilege held by a principal in the AccessRegistry.

    ADMIN: may grant and revoke both roles, and report valuations.
    DEPOSITOR: may deposit into a permissioned ledger.
    """
    ADMIN = "admin"
    DEPOSITOR = "depositor"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class TransferRuleViolation(LedgerError):
    """Raised when a move violates the unit's transfer rule."""
    pass


class UnitNotRegistered(LedgerError):
    """Raised when attempting to operate on a unit that has not been registered."""
    pass


class WalletNotRegistered(LedgerError):
    """Raised when attempting to operate on a wallet that has not been registered."""
    pass


class Unauthorized(LedgerError):
    """Raised when the caller lacks the role an operation requires."""
    pass


class InvalidAmount(LedgerError):
    """Raised for a zero, negative or otherwise out-of-domain quantity."""
    pass


class InvalidValue(LedgerError):
    """Raised when a reported valuation is not strictly positive."""
    pass


class InsufficientBalance(LedgerError):
    """Raised when a burn or withdraw exceeds the principal's share holdings."""
    pass


class ExternalTransferFailed(LedgerError):
    """Raised when a custody pull or push reports failure."""
    pass


class ReentrantCall(LedgerError):
    """Raised when a guarded operation is entered while another is in flight."""
    pass


class DivisionByZero(LedgerError):
    """Raised when a conversion would divide by a zero supply or valuation."""
    pass


class ZeroSupply(DivisionByZero):
    """Raised when converting shares to assets with no shares outstanding."""
    pass


class ZeroValuation(DivisionByZero):
    """Raised when converting assets to shares against a zero valuation with shares outstanding."""
    pass


class OperationNotSupported(LedgerError):
    """Raised when an operation is outside the surface of the configured variant."""
    pass


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class LedgerView(Protocol):
    """
    Read-only interface to book state.

    Functions accepting a LedgerView parameter declare their read-only intent.
    The Ledger class implements this protocol but also provides mutation
    methods. For testing, FakeView provides a truly immutable implementation.
    """

    @property
    def current_time(self) -> datetime:
        """Return the current logical time of the book."""
        ...

    def get_balance(self, wallet_id: str, unit_symbol: str) -> int:
        """
        Return the balance of a specific unit in a wallet.

        Returns 0 if the wallet holds none of the unit.
        """
        ...

    def get_positions(self, unit_symbol: str) -> Positions:
        """Return all non-zero positions for a unit across all wallets."""
        ...

    def list_wallets(self) -> Set[str]:
        """Return the set of all registered wallet IDs."""
        ...

    def get_unit(self, symbol: str) -> 'Unit':
        """Return the Unit object for a given symbol."""
        ...


@runtime_checkable
class ClaimToken(Protocol):
    """
    Fungible claim-token ledger.

    The share engine is the sole authorized minter and burner.
    """

    def mint(self, to: Principal, amount: ShareAmount) -> None:
        ...

    def burn(self, from_: Principal, amount: ShareAmount) -> None:
        ...

    def balance_of(self, principal: Principal) -> ShareAmount:
        ...

    def total_supply(self) -> ShareAmount:
        ...


@runtime_checkable
class CustodyTransport(Protocol):
    """
    Base-asset custody transport.

    Both calls are fallible: a False return must abort the enclosing operation.
    """

    def pull_from(self, principal: Principal, amount: AssetAmount) -> bool:
        ...

    def push_to(self, destination: Principal, amount: AssetAmount) -> bool:
        ...


@runtime_checkable
class EventSink(Protocol):
    """Durable, append-only, ordered notification stream."""

    def emit(self, name: str, **params: Any) -> 'Any':
        ...


@runtime_checkable
class Transactional(Protocol):
    """
    A collaborator whose state can be captured and put back.

    The share engine snapshots every Transactional participant at the start of
    a guarded call and restores them if the call raises.
    """

    def snapshot(self) -> Any:
        ...

    def restore(self, snapshot: Any) -> None:
        ...


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

def _is_amount(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True, slots=True)
class Move:
    """
    A single transfer of value between two wallets.

    Attributes:
        quantity: The amount to transfer (positive int, base units).
        unit_symbol: The symbol of the unit being transferred (e.g., "USDC", "vSHARE").
        source: The wallet ID from which value is debited.
        dest: The wallet ID to which value is credited.
        contract_id: Identifier of the component generating this move.
    """
    quantity: int
    unit_symbol: str
    source: str
    dest: str
    contract_id: str

    def __post_init__(self):
        if not self.source or not self.source.strip():
            raise ValueError("Move source cannot be empty")
        if not self.dest or not self.dest.strip():
            raise ValueError("Move dest cannot be empty")
        if not self.unit_symbol or not self.unit_symbol.strip():
            raise ValueError("Move unit_symbol cannot be empty")
        if not self.contract_id or not self.contract_id.strip():
            raise ValueError("Move contract_id cannot be empty")
        if not _is_amount(self.quantity):
            raise ValueError(f"Move quantity must be int, got {type(self.quantity)}")
        if self.quantity <= 0:
            raise ValueError(f"Move quantity must be positive, got {self.quantity}")
        if self.source == self.dest:
            raise ValueError("Source and dest must be different")

    def __repr__(self) -> str:
        return f"Move({self.quantity} {self.unit_symbol}: {self.source}→{self.dest})"


@dataclass(frozen=True, slots=True)
class PendingTransaction:
    """
    A transaction specification before execution - represents INTENT.

    Built by collaborators and submitted to Ledger.execute(), which either
    applies every move or none of them.

    Attributes:
        moves: Tuple of value transfers between wallets
        timestamp: When this pending transaction was created
        memo: Short description of why the moves happen (e.g. "mint", "pull")
    """
    moves: Tuple[Move, ...]
    timestamp: datetime
    memo: str = ""

    def is_empty(self) -> bool:
        """Return True if this pending transaction has no moves."""
        return not self.moves

    def __repr__(self) -> str:
        return f"PendingTransaction({len(self.moves)} moves, memo={self.memo!r})"


def build_transaction(
    view: LedgerView,
    moves: List[Move],
    memo: str = "",
) -> PendingTransaction:
    """
    Build a PendingTransaction from moves.

    Args:
        view: Read-only ledger view (provides current_time)
        moves: List of moves to include in the transaction
        memo: Optional description recorded in the transaction log

    Returns:
        A PendingTransaction ready for execution

    Example:
        tx = build_transaction(book, [
            Move(100, "USDC", "alice", "vault", "custody")
        ], memo="pull")
        book.execute(tx)
    """
    return PendingTransaction(
        moves=tuple(moves),
        timestamp=view.current_time,
        memo=memo,
    )


@dataclass(frozen=True, slots=True)
class Transaction:
    """
    An executed, immutable record of book state changes - represents FACT.

    Attributes:
        moves: Tuple of value transfers between wallets
        memo: Description carried over from the PendingTransaction
        timestamp: When the PendingTransaction was created
        exec_id: Unique execution identifier (ledger + sequence)
        ledger_name: Name of the ledger that executed this
        execution_time: When this was executed and logged
        sequence_number: Monotonic sequence within the ledger (for ordering)
        contract_ids: Set of contract IDs from moves (auto-populated)
    """
    moves: Tuple[Move, ...]
    memo: str
    timestamp: datetime
    exec_id: str
    ledger_name: str
    execution_time: datetime
    sequence_number: int
    contract_ids: FrozenSet[str] = None

    def __post_init__(self):
        if not self.moves:
            raise ValueError("Transaction must have moves")
        if self.contract_ids is None:
            object.__setattr__(
                self, 'contract_ids',
                frozenset(m.contract_id for m in self.moves)
            )

    def __repr__(self) -> str:
        moves = ", ".join(repr(m) for m in self.moves)
        return f"Transaction({self.exec_id}, {self.memo!r}: {moves})"


# Type alias for transfer rule functions.
# Transfer rules validate moves and raise TransferRuleViolation if invalid.
TransferRule = Callable[[LedgerView, Move], None]


def _freeze_state(state: Optional[UnitState]) -> Tuple[Tuple[str, Any], ...]:
    """Convert a state dict to a sorted tuple of (key, value) pairs."""
    if not state:
        return ()
    return tuple(sorted(state.items()))


def _thaw_state(frozen_state: Tuple[Tuple[str, Any], ...]) -> UnitState:
    """Convert a frozen state representation back to a mutable dict."""
    return dict(frozen_state)


@dataclass(frozen=True, slots=True)
class Unit:
    """
    Definition of a unit (asset type) held in the book.

    Attributes:
        symbol: Short identifier for the unit (e.g., "USDC", "vSHARE").
        name: Human-readable name for the unit.
        unit_type: UNIT_TYPE_ASSET or UNIT_TYPE_SHARE.
        min_balance: Minimum allowed balance in any non-system wallet.
        max_balance: Maximum allowed balance in any wallet (None = unbounded).
        decimals: Fixed-point decimals of the integer amounts.
        transfer_rule: Optional function to validate moves involving this unit.
        _frozen_state: Internal frozen state representation.
    """
    symbol: str
    name: str
    unit_type: str
    min_balance: int = 0
    max_balance: Optional[int] = None
    decimals: int = ASSET_DECIMALS
    transfer_rule: Optional[TransferRule] = None
    _frozen_state: Tuple[Tuple[str, Any], ...] = field(default_factory=tuple)

    @property
    def state(self) -> UnitState:
        """Get the unit's state as a new dict."""
        return _thaw_state(self._frozen_state)


# ============================================================================
# TRANSFER RULES
# ============================================================================

def issuer_transfer_rule(view: LedgerView, move: Move) -> None:
    """
    Enforce that only the unit's issuer can mint into or burn out of circulation.

    Issuance and redemption are moves out of or into SYSTEM_WALLET. Such moves
    must carry the issuer's id as contract_id. Transfers between ordinary
    wallets are not restricted.

    Raises:
        TransferRuleViolation: If the unit has no issuer in its state, or if a
                               move touching SYSTEM_WALLET comes from anyone
                               other than the issuer.
    """
    if SYSTEM_WALLET not in (move.source, move.dest):
        return
    issuer = view.get_unit(move.unit_symbol).state.get('issuer')
    if not issuer:
        raise TransferRuleViolation(f"Unit {move.unit_symbol} has no issuer")
    if move.contract_id != issuer:
        raise TransferRuleViolation(
            f"{move.unit_symbol}: {move.contract_id} is not the issuer ({issuer})"
        )


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass(frozen=True, slots=True)
class VaultConfig:
    """
    Static configuration of one share ledger deployment.

    Attributes:
        admin: Seed Admin principal.
        asset_symbol: Base-asset unit symbol.
        share_symbol: Claim-token unit symbol.
        vault_wallet: Wallet that holds the ledger's own custody.
        portfolio_wallet: Custody sink deposits are forwarded to (None keeps
                          assets in the vault wallet).
        name: Book name, used in execution ids.
    """
    admin: Principal
    asset_symbol: str = "USDC"
    share_symbol: str = "vSHARE"
    vault_wallet: Principal = "vault"
    portfolio_wallet: Optional[Principal] = None
    name: str = "vault"

    def __post_init__(self):
        for attr in ("admin", "asset_symbol", "share_symbol", "vault_wallet", "name"):
            value = getattr(self, attr)
            if not value or not value.strip():
                raise ValueError(f"VaultConfig {attr} cannot be empty")
        if self.asset_symbol == self.share_symbol:
            raise ValueError("asset_symbol and share_symbol must be different")
        reserved = {SYSTEM_WALLET}
        if self.vault_wallet in reserved or self.portfolio_wallet in reserved:
            raise ValueError(f"{SYSTEM_WALLET!r} is reserved")
        if self.portfolio_wallet == self.vault_wallet:
            raise ValueError("portfolio_wallet must differ from vault_wallet")
