#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Learn the Share Ledger Step by Step

A walk through how deposits become shares and shares become withdrawal
requests. Each step builds on the previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-2:  Self-custodial  - NAV observed from custody, income accrues to holders
  3-4:  Reported NAV    - Admin reports, deposits, burn-then-fulfill withdrawals
  5:    Permissioned    - Whitelisting and rejected deposits
  6:    Safety          - Reentrant collaborators roll back the whole call
  7:    Fulfillment     - An off-ledger agent reading requests by cursor

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
import sys

from vault import (
    # Configuration and variants
    VaultConfig,
    create_self_custodial_vault, create_reported_vault, create_permissioned_vault,
    # Book
    Move, build_transaction, ExecuteResult,
    # Errors
    LedgerError, ReentrantCall, Unauthorized,
    # Events
    WITHDRAWAL_REQUEST,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    admin: str = "admin"

    # Initial funding
    alice_initial: int = 1_000
    bob_initial: int = 1_000

    # Reported walk-through
    opening_value: int = 1_000
    alice_deposit: int = 100
    marked_value: int = 1_100
    bob_deposit: int = 110
    alice_burn: int = 50

    # Self-custodial income
    income: int = 400


CONFIG = DemoConfig()

# Global state for interactive mode
QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    """Print a step header with learning objective."""
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    """Print a section header within a step."""
    print(f"\n--- {text} ---\n")


def show_holdings(vault, principals):
    for p in principals:
        print(f"{p:<10} shares={vault.ledger.balance_of(p):<6} asset={vault.asset_balance(p)}")
    print(f"{'supply':<10} {vault.ledger.total_supply()}")
    print(f"{'valuation':<10} {vault.ledger.total_valuation()}")


def funded(vault):
    vault.fund("alice", CONFIG.alice_initial)
    vault.fund("bob", CONFIG.bob_initial)
    return vault


# ============================================================================
# SELF-CUSTODIAL (Steps 1-2)
# ============================================================================

def step_01_self_custodial():
    """Create a self-custodial vault and make the bootstrap deposit."""
    step_header(1, "The Self-Custodial Vault",
        "NAV is whatever asset the vault wallet holds. The first deposit mints 1:1.")

    print("""
    A share ledger converts a base asset into shares. The exchange rate is

        price = valuation / total_supply

    In a self-custodial vault the valuation is OBSERVED: it is the vault
    wallet's own asset balance. There is no admin report and no withdraw.
    """)

    wait_for_enter()

    print(">>> vault = create_self_custodial_vault(VaultConfig(admin='admin'), verbose=True)")
    vault = funded(create_self_custodial_vault(VaultConfig(admin=CONFIG.admin), verbose=True))

    print(f"\n>>> vault.ledger.deposit('alice', {CONFIG.income})")
    vault.ledger.deposit("alice", CONFIG.income)

    section_header("Holdings")
    show_holdings(vault, ["alice"])
    print(f"Price per share: {vault.reporter.price_per_share_decimal()}")

    return vault


def step_02_income(vault):
    """Income lands in custody and raises the price."""
    step_header(2, "Income Accrues to Holders",
        "Asset sent straight to custody raises NAV without minting shares.")

    print(f">>> vault.fund('vault', {CONFIG.income})   # income, no shares minted")
    vault.fund(vault.config.vault_wallet, CONFIG.income)
    print(f"Price per share: {vault.reporter.price_per_share_decimal()}")
    print(f"Alice's claim:   {vault.reporter.share_value('alice')}")

    print(f"\n>>> vault.ledger.deposit('bob', {CONFIG.income})")
    vault.ledger.deposit("bob", CONFIG.income)

    section_header("Holdings")
    show_holdings(vault, ["alice", "bob"])

    section_header("Key Insight")
    print("""
    Bob's deposit is priced against a valuation that already includes his
    own inflow, so he receives fewer shares than the pre-deposit price
    suggests. Conversions always round DOWN, in favour of the pool.
    """)
    return vault


# ============================================================================
# REPORTED NAV (Steps 3-4)
# ============================================================================

def step_03_reported_deposits():
    """Admin-reported NAV with deposits forwarded to the portfolio."""
    step_header(3, "Reported NAV",
        "An Admin reports the portfolio value; deposits are priced against it.")

    print("""
    A reported vault forwards every deposit to its portfolio wallet, where
    the asset is invested off-ledger. The Admin reports what it is worth.
    """)

    wait_for_enter()

    vault = funded(create_reported_vault(VaultConfig(admin=CONFIG.admin), verbose=True))
    ledger = vault.ledger

    print(f">>> ledger.set_portfolio_value('admin', {CONFIG.opening_value})")
    ledger.set_portfolio_value(CONFIG.admin, CONFIG.opening_value)
    print(f">>> ledger.deposit('alice', {CONFIG.alice_deposit})   # empty supply: 1:1")
    ledger.deposit("alice", CONFIG.alice_deposit)

    print(f"\n>>> ledger.set_portfolio_value('admin', {CONFIG.marked_value})")
    ledger.set_portfolio_value(CONFIG.admin, CONFIG.marked_value)
    print(f"Price per share: {vault.reporter.price_per_share_decimal()}")

    print(f"\n>>> ledger.deposit('bob', {CONFIG.bob_deposit})")
    ledger.deposit("bob", CONFIG.bob_deposit)

    section_header("Holdings")
    show_holdings(vault, ["alice", "bob"])
    print(f"{'portfolio':<10} asset={vault.asset_balance(ledger.sink)}")

    return vault


def step_04_withdraw(vault):
    """Withdrawals burn shares and emit a request."""
    step_header(4, "Burn Then Fulfill",
        "withdraw() burns shares and records what is owed. It pays nothing itself.")

    print(f">>> ledger.preview_withdraw('alice', {CONFIG.alice_burn})")
    print(vault.ledger.preview_withdraw("alice", CONFIG.alice_burn))
    print(f"\n>>> ledger.withdraw('alice', {CONFIG.alice_burn})")
    vault.ledger.withdraw("alice", CONFIG.alice_burn)

    request = vault.events.last(WITHDRAWAL_REQUEST)
    section_header("WithdrawalRequest")
    print(f"Sequence: {request.sequence}")
    print(f"Params:   {request.params_dict}")

    section_header("Key Insight")
    print("""
    The asset is still in the portfolio wallet. Until an off-ledger agent
    pays the request and the Admin reports the lower value, the reported
    NAV is stale and later withdrawals are priced on money already owed.
    """)
    return vault


# ============================================================================
# PERMISSIONED (Step 5)
# ============================================================================

def step_05_permissioned():
    """Only whitelisted principals may deposit."""
    step_header(5, "Permissioned Deposits",
        "Deposits require the Depositor role. Withdrawals do not.")

    vault = funded(create_permissioned_vault(VaultConfig(admin=CONFIG.admin), verbose=True))
    ledger = vault.ledger

    print(">>> ledger.deposit('bob', 100)   # not whitelisted")
    try:
        ledger.deposit("bob", 100)
    except Unauthorized as exc:
        print(f"Rejected: {exc}")

    print("\n>>> ledger.add_to_whitelist('admin', 'alice')")
    ledger.add_to_whitelist(CONFIG.admin, "alice")
    print(">>> ledger.deposit('alice', 100)")
    ledger.deposit("alice", 100)

    section_header("Roles")
    print(f"Registry: {vault.registry}")
    return vault


# ============================================================================
# SAFETY (Step 6)
# ============================================================================

class ReentrantCustody:
    """Custody transport that tries to call back into the ledger mid-transfer."""

    def __init__(self, inner, attack):
        self.inner = inner
        self.attack = attack

    def pull_from(self, principal, amount):
        moved = self.inner.pull_from(principal, amount)
        self.attack()
        return moved

    def push_to(self, destination, amount):
        return self.inner.push_to(destination, amount)


def step_06_reentrancy(vault):
    """A hostile collaborator cannot re-enter, and its partial work is undone."""
    step_header(6, "Reentrancy and Rollback",
        "A nested call is refused and the outer call leaves no trace.")

    ledger = vault.ledger
    supply_before = ledger.total_supply()
    events_before = len(vault.events)
    alice_before = vault.asset_balance("alice")

    honest = ledger.custody
    ledger.custody = ReentrantCustody(honest, lambda: ledger.deposit("alice", 1))
    print(">>> ledger.deposit('alice', 100)   # custody re-enters during the pull")
    try:
        ledger.deposit("alice", 100)
    except ReentrantCall as exc:
        print(f"Raised: {exc}")
    finally:
        ledger.custody = honest

    section_header("After Rollback")
    print(f"Supply unchanged:  {ledger.total_supply() == supply_before}")
    print(f"Events unchanged:  {len(vault.events) == events_before}")
    print(f"Asset unchanged:   {vault.asset_balance('alice') == alice_before}")
    print(f"Guard released:    {not ledger.guard.locked}")


# ============================================================================
# FULFILLMENT (Step 7)
# ============================================================================

def step_07_fulfillment(vault):
    """Pay outstanding requests from the portfolio and report the new value."""
    step_header(7, "Fulfillment by Cursor",
        "Requests are read from a cursor so each is paid exactly once.")

    ledger = vault.ledger
    cursor = 0
    for request in ledger.withdrawals.pending(cursor):
        tx = build_transaction(vault.book, [
            Move(request["amount"], vault.config.asset_symbol, ledger.sink,
                 request["principal"], "fulfillment")
        ], memo="fulfill")
        result = vault.book.execute(tx)
        print(f"Paid {request['amount']} to {request['principal']}: {result.value}")
        if result == ExecuteResult.APPLIED:
            cursor = request.sequence + 1

    remaining = vault.asset_balance(ledger.sink)
    print(f"\n>>> ledger.set_portfolio_value('admin', {remaining})")
    ledger.set_portfolio_value(CONFIG.admin, remaining)
    print(f"Next cursor: {cursor}, pending: {len(ledger.withdrawals.pending(cursor))}")

    section_header("Holdings")
    show_holdings(vault, ["alice", "bob"])

    report = vault.book.verify_double_entry()
    print(f"\nDouble entry valid: {report['valid']}")


def main():
    print("=" * 70)
    print("       PROPORTIONAL-SHARE LEDGER TUTORIAL")
    print("=" * 70)
    if QUICK_MODE:
        print("(quick mode: no pauses)")

    try:
        vault = step_01_self_custodial()
        wait_for_enter()
        step_02_income(vault)
        wait_for_enter()

        reported = step_03_reported_deposits()
        wait_for_enter()
        step_04_withdraw(reported)
        wait_for_enter()

        step_05_permissioned()
        wait_for_enter()

        step_06_reentrancy(reported)
        wait_for_enter()

        step_07_fulfillment(reported)
    except LedgerError as exc:
        print(f"\nTutorial stopped: {type(exc).__name__}: {exc}")
        sys.exit(1)

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)
    print("""
    You've learned:
      - Shares are priced at valuation / supply, rounded for the pool
      - Self-custodial vaults observe NAV, reported vaults trust an Admin
      - Withdrawals burn first and are paid off-ledger
      - Failed calls, including reentrant ones, leave no trace

    Run tests: pytest tests/
    """)


if __name__ == "__main__":
    main()
