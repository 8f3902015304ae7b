"""
vault - Proportional-Share NAV Ledger

Converts deposits of a base asset into fungible shares and back, at a rate set
by the total backing value (NAV). NAV is either observed from the ledger's own
custody or reported by an Admin.

Usage:
    from vault import VaultConfig, create_reported_vault

    v = create_reported_vault(VaultConfig(admin="admin"))
    v.fund("alice", 1_000)

    v.ledger.set_portfolio_value("admin", 1_000)
    v.ledger.deposit("alice", 100)            # 100 shares (bootstrap 1:1)
    v.ledger.set_portfolio_value("admin", 1_100)
    v.reporter.price_per_share_decimal()      # == Decimal('11')

    v.ledger.withdraw("alice", 50)            # 550 owed, WithdrawalRequest emitted
"""

# Core types
from .core import (
    LedgerView,
    ClaimToken,
    CustodyTransport,
    EventSink,
    Transactional,
    Move,
    Transaction,
    PendingTransaction,
    build_transaction,
    Unit,
    ExecuteResult,
    Role,
    VaultConfig,
    Principal,
    AssetAmount,
    ShareAmount,
    LedgerError,
    TransferRuleViolation,
    UnitNotRegistered,
    WalletNotRegistered,
    Unauthorized,
    InvalidAmount,
    InvalidValue,
    InsufficientBalance,
    ExternalTransferFailed,
    ReentrantCall,
    DivisionByZero,
    ZeroSupply,
    ZeroValuation,
    OperationNotSupported,
    issuer_transfer_rule,
    SYSTEM_WALLET,
    UNIT_TYPE_ASSET,
    UNIT_TYPE_SHARE,
    ASSET_DECIMALS,
    PRICE_UNIT,
)

# Book of record
from .ledger import Ledger

# Collaborators backed by the book
from .units.asset import AssetCustody, create_asset_unit, issue_asset
from .units.share import ShareToken, create_share_unit

# Access control
from .access import AccessRegistry

# Valuation
from .valuation import (
    ValuationOracle,
    ObservedValuation,
    ReportedValuation,
    ValuationReport,
)

# Conversion math
from .conversion import (
    preview_deposit,
    preview_withdraw,
    price_per_share,
    to_decimal,
)

# Events and withdrawals
from .events import (
    Event,
    EventLog,
    DEPOSIT,
    WITHDRAWAL_REQUEST,
    PORTFOLIO_VALUE_SET,
    WHITELISTED,
    ADMIN_SET,
)
from .withdrawals import WithdrawalCoordinator

# Engine
from .guard import ReentrancyGuard
from .share_ledger import ShareLedger
from .reporter import PriceReporter

# Variants
from .variants import (
    Vault,
    create_self_custodial_vault,
    create_reported_vault,
    create_permissioned_vault,
    DEFAULT_PORTFOLIO_WALLET,
)

__all__ = [
    # Core
    'LedgerView', 'ClaimToken', 'CustodyTransport', 'EventSink', 'Transactional',
    'Move', 'Transaction', 'PendingTransaction', 'build_transaction',
    'Unit', 'ExecuteResult', 'Role', 'VaultConfig',
    'Principal', 'AssetAmount', 'ShareAmount',
    'LedgerError',
    'TransferRuleViolation', 'UnitNotRegistered', 'WalletNotRegistered',
    'Unauthorized', 'InvalidAmount', 'InvalidValue', 'InsufficientBalance',
    'ExternalTransferFailed', 'ReentrantCall', 'DivisionByZero',
    'ZeroSupply', 'ZeroValuation', 'OperationNotSupported',
    'issuer_transfer_rule',
    'SYSTEM_WALLET', 'UNIT_TYPE_ASSET', 'UNIT_TYPE_SHARE', 'ASSET_DECIMALS', 'PRICE_UNIT',
    # Book
    'Ledger',
    'AssetCustody', 'create_asset_unit', 'issue_asset',
    'ShareToken', 'create_share_unit',
    # Access
    'AccessRegistry',
    # Valuation
    'ValuationOracle', 'ObservedValuation', 'ReportedValuation', 'ValuationReport',
    # Conversion
    'preview_deposit', 'preview_withdraw', 'price_per_share', 'to_decimal',
    # Events
    'Event', 'EventLog', 'DEPOSIT', 'WITHDRAWAL_REQUEST', 'PORTFOLIO_VALUE_SET',
    'WHITELISTED', 'ADMIN_SET', 'WithdrawalCoordinator',
    # Engine
    'ReentrancyGuard', 'ShareLedger', 'PriceReporter',
    # Variants
    'Vault', 'create_self_custodial_vault', 'create_reported_vault',
    'create_permissioned_vault', 'DEFAULT_PORTFOLIO_WALLET',
]

__version__ = '1.0.0'
