"""
variants.py - Factories for the three share ledger variants

- create_self_custodial_vault(): NAV is the asset held in the vault wallet;
  deposits only, no custody sink
- create_reported_vault(): NAV is reported by an Admin; deposits are
  forwarded to the portfolio wallet and withdrawals are burn-then-fulfill
- create_permissioned_vault(): the reported vault with deposits restricted to
  Role.DEPOSITOR

Each factory wires one book, one registry and one event log into a Vault.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from .access import AccessRegistry
from .core import Principal, AssetAmount, ExecuteResult, VaultConfig
from .events import EventLog
from .ledger import Ledger
from .reporter import PriceReporter
from .share_ledger import ShareLedger
from .units.asset import AssetCustody, create_asset_unit, issue_asset
from .units.share import ShareToken, create_share_unit
from .valuation import ObservedValuation, ReportedValuation, ValuationOracle

# Custody sink used by reported vaults when the config names none.
DEFAULT_PORTFOLIO_WALLET = "portfolio"


@dataclass
class Vault:
    """
    One deployed share ledger and its collaborators.

    `ledger` is the operation surface; the rest are exposed for inspection.
    """
    config: VaultConfig
    book: Ledger
    token: ShareToken
    custody: AssetCustody
    oracle: ValuationOracle
    registry: AccessRegistry
    events: EventLog
    ledger: ShareLedger
    reporter: PriceReporter

    def fund(self, principal: Principal, amount: AssetAmount) -> ExecuteResult:
        """Issue base asset to a principal so it can deposit."""
        return issue_asset(self.book, principal, amount, self.config.asset_symbol)

    def asset_balance(self, principal: Principal) -> AssetAmount:
        if not self.book.is_registered(principal):
            return 0
        return self.book.get_balance(principal, self.config.asset_symbol)


def _build(
    config: VaultConfig,
    reported: bool,
    permissioned: bool,
    sink: Optional[Principal],
    book: Optional[Ledger],
    verbose: bool,
    price_after_inflow: bool = True,
) -> Vault:
    if book is None:
        book = Ledger(config.name, verbose=verbose)
    if config.asset_symbol not in book.units:
        book.register_unit(create_asset_unit(config.asset_symbol, config.asset_symbol))
    book.register_unit(create_share_unit(config.share_symbol, f"{config.name} shares", minter=config.name))
    book.ensure_wallet(config.admin)

    registry = AccessRegistry(config.admin)
    events = EventLog(clock=book)
    token = ShareToken(book, config.share_symbol, minter=config.name)
    custody = AssetCustody(book, config.asset_symbol, config.vault_wallet)
    if reported:
        oracle = ReportedValuation(registry)
    else:
        oracle = ObservedValuation(book, config.vault_wallet, config.asset_symbol)

    ledger = ShareLedger(
        token=token,
        custody=custody,
        oracle=oracle,
        registry=registry,
        events=events,
        sink=sink,
        permissioned=permissioned,
        price_after_inflow=price_after_inflow,
        name=config.name,
        verbose=verbose,
    )
    return Vault(
        config=config,
        book=book,
        token=token,
        custody=custody,
        oracle=oracle,
        registry=registry,
        events=events,
        ledger=ledger,
        reporter=PriceReporter(ledger),
    )


def create_self_custodial_vault(
    config: VaultConfig,
    book: Optional[Ledger] = None,
    verbose: bool = False,
    price_after_inflow: bool = True,
) -> Vault:
    """
    Variant A: NAV is the vault wallet's own asset balance.

    By default a deposit is priced after its own asset has arrived, so the
    depositor's inflow is part of the valuation it is priced against. Pass
    price_after_inflow=False to price against the balance before the pull.

    Raises:
        ValueError: If the config names a portfolio wallet (assets must stay
                    in the vault's custody to be observed)
    """
    if config.portfolio_wallet is not None:
        raise ValueError("a self-custodial vault keeps deposits in its own custody")
    return _build(
        config, reported=False, permissioned=False, sink=None, book=book,
        verbose=verbose, price_after_inflow=price_after_inflow,
    )


def create_reported_vault(
    config: VaultConfig,
    book: Optional[Ledger] = None,
    verbose: bool = False,
) -> Vault:
    """Variant B: NAV is reported by an Admin, deposits go to the portfolio wallet."""
    sink = config.portfolio_wallet or DEFAULT_PORTFOLIO_WALLET
    return _build(config, reported=True, permissioned=False, sink=sink, book=book, verbose=verbose)


def create_permissioned_vault(
    config: VaultConfig,
    book: Optional[Ledger] = None,
    verbose: bool = False,
) -> Vault:
    """Variant C: Variant B with deposits restricted to whitelisted principals."""
    sink = config.portfolio_wallet or DEFAULT_PORTFOLIO_WALLET
    return _build(config, reported=True, permissioned=True, sink=sink, book=book, verbose=verbose)
