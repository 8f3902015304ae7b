"""
test_share_ledger.py - Unit tests for share_ledger.py

Tests:
- Deposit pricing per variant (bootstrap, proportional, inflow ordering)
- Custody routing (self-custody vs forwarding to the portfolio wallet)
- Withdraw (pre-burn pricing, obligation event, error paths)
- Administration surface (portfolio value, whitelist, admin role)
- Operations outside a variant's surface
- verbose output
"""

import pytest

from vault import (
    Ledger, create_self_custodial_vault, create_reported_vault, create_permissioned_vault,
    Role, PRICE_UNIT, DEPOSIT, WITHDRAWAL_REQUEST, PORTFOLIO_VALUE_SET,
    WHITELISTED, ADMIN_SET,
    Unauthorized, InvalidAmount, InvalidValue, InsufficientBalance,
    ExternalTransferFailed, ZeroValuation, OperationNotSupported,
)
from tests.vault_helpers import ADMIN, make_config, fund_all, capture_state


class TestReads:

    def test_empty_ledger(self, any_vault):
        ledger = any_vault.ledger
        assert ledger.total_supply() == 0
        assert ledger.total_valuation() == 0
        assert ledger.balance_of("alice") == 0
        assert ledger.price_per_share() == PRICE_UNIT

    def test_supports_withdraw(self, self_custodial, reported, permissioned):
        assert not self_custodial.ledger.supports_withdraw
        assert reported.ledger.supports_withdraw
        assert permissioned.ledger.supports_withdraw

    def test_prices_after_inflow_only_when_observed(self, self_custodial, reported):
        assert self_custodial.ledger.prices_after_inflow
        assert not reported.ledger.prices_after_inflow

    def test_preview_deposit_bootstrap(self, any_vault):
        assert any_vault.ledger.preview_deposit(100) == 100

    def test_preview_deposit_rejects_non_positive(self, any_vault):
        with pytest.raises(InvalidAmount):
            any_vault.ledger.preview_deposit(0)

    def test_repr(self, reported):
        assert repr(reported.ledger) == "ShareLedger(vault, supply=0, valuation=0)"


class TestSelfCustodialDeposit:
    """Variant A: the custody balance is the valuation."""

    def test_first_deposit_is_one_to_one(self, self_custodial):
        shares = self_custodial.ledger.deposit("alice", 100)
        assert shares == 100
        assert self_custodial.ledger.balance_of("alice") == 100
        assert self_custodial.custody.held() == 100
        assert self_custodial.ledger.total_valuation() == 100

    def test_deposit_is_priced_after_its_own_inflow(self, self_custodial):
        ledger = self_custodial.ledger
        ledger.deposit("alice", 100)
        # valuation seen by the pricing step is 100 + 200
        assert ledger.quote_deposit(200) == 66
        assert ledger.preview_deposit(200) == 200
        assert ledger.deposit("bob", 200) == 66
        assert ledger.total_supply() == 166
        assert self_custodial.custody.held() == 300

    def test_priced_before_inflow_when_configured(self):
        vault = fund_all(create_self_custodial_vault(make_config(), price_after_inflow=False))
        vault.ledger.deposit("alice", 100)
        assert not vault.ledger.prices_after_inflow
        assert vault.ledger.quote_deposit(200) == 200
        assert vault.ledger.deposit("bob", 200) == 200

    def test_direct_transfer_raises_price(self, self_custodial):
        self_custodial.ledger.deposit("alice", 100)
        self_custodial.fund("vault", 100)
        assert self_custodial.ledger.price_per_share() == 2 * PRICE_UNIT

    def test_assets_stay_in_vault_wallet(self, self_custodial):
        self_custodial.ledger.deposit("alice", 100)
        assert not self_custodial.book.is_registered("portfolio")
        assert self_custodial.ledger.sink is None

    def test_withdraw_not_supported(self, self_custodial):
        self_custodial.ledger.deposit("alice", 100)
        with pytest.raises(OperationNotSupported):
            self_custodial.ledger.withdraw("alice", 10)
        with pytest.raises(OperationNotSupported):
            self_custodial.ledger.preview_withdraw("alice", 10)
        assert self_custodial.ledger.balance_of("alice") == 100

    def test_portfolio_value_not_supported(self, self_custodial):
        with pytest.raises(OperationNotSupported):
            self_custodial.ledger.set_portfolio_value(ADMIN, 1_000)
        assert self_custodial.events.last(PORTFOLIO_VALUE_SET) is None

    def test_whitelist_not_supported(self, self_custodial):
        with pytest.raises(OperationNotSupported):
            self_custodial.ledger.add_to_whitelist(ADMIN, "alice")


class TestReportedDeposit:
    """Variant B: the valuation is whatever the Admin last reported."""

    def test_bootstrap_then_proportional(self, reported):
        ledger = reported.ledger
        ledger.set_portfolio_value(ADMIN, 1_000)
        assert ledger.deposit("alice", 100) == 100
        ledger.set_portfolio_value(ADMIN, 1_100)
        assert ledger.deposit("bob", 110) == 10
        assert ledger.total_supply() == 110

    def test_deposit_is_forwarded_to_portfolio(self, reported):
        reported.ledger.deposit("alice", 100)
        assert reported.custody.held() == 0
        assert reported.asset_balance("portfolio") == 100

    def test_deposit_does_not_move_reported_value(self, reported):
        reported.ledger.set_portfolio_value(ADMIN, 1_000)
        reported.ledger.deposit("alice", 100)
        assert reported.ledger.total_valuation() == 1_000

    def test_custom_portfolio_wallet(self):
        vault = fund_all(create_reported_vault(make_config(portfolio_wallet="custodian")))
        vault.ledger.deposit("alice", 100)
        assert vault.asset_balance("custodian") == 100

    def test_zero_valuation_with_supply_rejected(self, reported):
        reported.ledger.deposit("alice", 100)
        before = capture_state(reported)
        with pytest.raises(ZeroValuation):
            reported.ledger.deposit("bob", 100)
        assert capture_state(reported) == before

    def test_deposit_rounding_to_zero_rejected(self, reported):
        reported.ledger.deposit("alice", 100)
        reported.ledger.set_portfolio_value(ADMIN, 1_000)
        before = capture_state(reported)
        with pytest.raises(InvalidAmount, match="zero shares"):
            reported.ledger.deposit("bob", 9)
        assert capture_state(reported) == before

    def test_deposit_event(self, reported):
        reported.ledger.deposit("alice", 100)
        event = reported.events.last(DEPOSIT)
        assert event.params_dict == {"principal": "alice", "amount": 100, "shares": 100}


class TestDepositErrors:

    @pytest.mark.parametrize("amount", [0, -1, 1.5])
    def test_invalid_amount(self, any_vault, amount):
        with pytest.raises(InvalidAmount):
            any_vault.ledger.deposit("alice", amount)

    def test_unfunded_principal(self, any_vault):
        before = capture_state(any_vault)
        with pytest.raises(ExternalTransferFailed):
            any_vault.ledger.deposit("alice", 10 ** 30)
        assert capture_state(any_vault) == before

    def test_unknown_principal(self, reported):
        with pytest.raises(ExternalTransferFailed):
            reported.ledger.deposit("dave", 1)


class TestPermissionedDeposit:
    """Variant C: deposits require Role.DEPOSITOR."""

    def test_whitelisted_depositor(self, permissioned):
        assert permissioned.ledger.deposit("alice", 100) == 100

    def test_non_whitelisted_rejected(self, permissioned):
        before = capture_state(permissioned)
        with pytest.raises(Unauthorized):
            permissioned.ledger.deposit("bob", 100)
        assert capture_state(permissioned) == before

    def test_authorization_checked_before_amount(self, permissioned):
        with pytest.raises(Unauthorized):
            permissioned.ledger.deposit("bob", 0)

    def test_admin_needs_depositor_role(self, permissioned):
        permissioned.fund(ADMIN, 100)
        with pytest.raises(Unauthorized):
            permissioned.ledger.deposit(ADMIN, 100)

    def test_whitelist_and_remove(self, permissioned):
        ledger = permissioned.ledger
        ledger.add_to_whitelist(ADMIN, "bob")
        assert ledger.deposit("bob", 10) == 10
        ledger.remove_from_whitelist(ADMIN, "bob")
        with pytest.raises(Unauthorized):
            ledger.deposit("bob", 10)
        assert [e.params_dict for e in permissioned.events.read(name=WHITELISTED)][-2:] == [
            {"principal": "bob", "status": True},
            {"principal": "bob", "status": False},
        ]

    def test_removed_depositor_can_still_withdraw(self, permissioned):
        ledger = permissioned.ledger
        ledger.set_portfolio_value(ADMIN, 100)
        ledger.deposit("alice", 100)
        ledger.remove_from_whitelist(ADMIN, "alice")
        assert ledger.withdraw("alice", 40) == 40

    def test_non_admin_cannot_whitelist(self, permissioned):
        with pytest.raises(Unauthorized):
            permissioned.ledger.add_to_whitelist("alice", "bob")
        assert not permissioned.registry.is_authorized("bob", Role.DEPOSITOR)

    def test_whitelist_ops_need_permissioned_ledger(self, reported):
        with pytest.raises(OperationNotSupported):
            reported.ledger.add_to_whitelist(ADMIN, "alice")
        with pytest.raises(OperationNotSupported):
            reported.ledger.remove_from_whitelist(ADMIN, "alice")
        assert len(reported.events) == 0


class TestWithdraw:
    """Burn-then-fulfill withdrawals on reported variants."""

    @pytest.fixture
    def funded(self, reported):
        reported.ledger.set_portfolio_value(ADMIN, 1_000)
        reported.ledger.deposit("alice", 100)
        reported.ledger.set_portfolio_value(ADMIN, 1_100)
        reported.ledger.deposit("bob", 110)
        return reported

    def test_owed_amount_uses_pre_burn_supply(self, funded):
        assert funded.ledger.preview_withdraw("alice", 50) == 500
        assert funded.ledger.withdraw("alice", 50) == 500
        assert funded.ledger.balance_of("alice") == 50
        assert funded.ledger.total_supply() == 60

    def test_emits_withdrawal_request(self, funded):
        funded.ledger.withdraw("alice", 50)
        event = funded.events.last(WITHDRAWAL_REQUEST)
        assert event.params_dict == {"principal": "alice", "amount": 500, "shares": 50}
        assert funded.ledger.withdrawals.pending() == [event]

    def test_no_asset_leaves_custody(self, funded):
        before = funded.asset_balance("alice")
        funded.ledger.withdraw("alice", 50)
        assert funded.asset_balance("alice") == before
        assert funded.asset_balance("portfolio") == 210

    def test_reported_value_is_not_adjusted(self, funded):
        funded.ledger.withdraw("alice", 50)
        assert funded.ledger.total_valuation() == 1_100

    def test_reported_value_goes_stale_between_withdrawals(self, funded):
        # the Admin is expected to report the reduced value after paying out
        assert funded.ledger.withdraw("bob", 10) == 100
        assert funded.ledger.withdraw("alice", 100) == 1_100
        assert funded.ledger.total_supply() == 0

    def test_more_than_held(self, funded):
        before = capture_state(funded)
        with pytest.raises(InsufficientBalance):
            funded.ledger.withdraw("bob", 11)
        assert capture_state(funded) == before

    @pytest.mark.parametrize("shares", [0, -3])
    def test_invalid_shares(self, funded, shares):
        with pytest.raises(InvalidAmount):
            funded.ledger.withdraw("alice", shares)

    def test_owing_nothing_rejected(self, reported):
        reported.ledger.set_portfolio_value(ADMIN, 1)
        reported.ledger.deposit("alice", 100)
        before = capture_state(reported)
        with pytest.raises(InvalidAmount, match="owe nothing"):
            reported.ledger.withdraw("alice", 1)
        assert capture_state(reported) == before

    def test_nothing_held(self, reported):
        with pytest.raises(InsufficientBalance):
            reported.ledger.preview_withdraw("alice", 1)


class TestAdministration:

    def test_set_portfolio_value(self, reported):
        reported.ledger.set_portfolio_value(ADMIN, 1_000)
        assert reported.ledger.total_valuation() == 1_000
        assert reported.oracle.last_set_by == ADMIN
        assert reported.events.last(PORTFOLIO_VALUE_SET).params_dict == {"value": 1_000, "actor": ADMIN}

    def test_non_admin_cannot_set_value(self, reported):
        with pytest.raises(Unauthorized):
            reported.ledger.set_portfolio_value("alice", 1_000)
        assert len(reported.events) == 0

    @pytest.mark.parametrize("value", [0, -1])
    def test_non_positive_value_rejected(self, reported, value):
        reported.ledger.set_portfolio_value(ADMIN, 500)
        with pytest.raises(InvalidValue):
            reported.ledger.set_portfolio_value(ADMIN, value)
        assert reported.ledger.total_valuation() == 500
        assert len(reported.events) == 1

    def test_set_admin(self, reported):
        reported.ledger.set_admin(ADMIN, "ops", True)
        reported.ledger.set_portfolio_value("ops", 10)
        assert reported.registry.is_authorized("ops", Role.ADMIN)
        assert reported.events.read(name=ADMIN_SET)[0].params_dict == {"principal": "ops", "enabled": True}

    def test_non_admin_cannot_set_admin(self, reported):
        with pytest.raises(Unauthorized):
            reported.ledger.set_admin("alice", "alice", True)
        assert reported.registry.members(Role.ADMIN) == frozenset({ADMIN})

    def test_revoke_admin(self, self_custodial):
        self_custodial.ledger.set_admin(ADMIN, "ops", True)
        self_custodial.ledger.set_admin("ops", ADMIN, False)
        assert self_custodial.registry.members(Role.ADMIN) == frozenset({"ops"})


class CountingBook(Ledger):
    """Book that counts how often its state is captured."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.snapshots = 0

    def snapshot(self):
        self.snapshots += 1
        return super().snapshot()


class TestParticipants:

    def test_shared_book_captured_once_per_call(self):
        book = CountingBook("vault", verbose=False)
        vault = fund_all(create_reported_vault(make_config(), book=book))
        vault.ledger.set_portfolio_value(ADMIN, 1_000)
        book.snapshots = 0

        vault.ledger.deposit("alice", 100)
        assert book.snapshots == 1

        vault.ledger.withdraw("alice", 10)
        assert book.snapshots == 2

    def test_shared_book_still_rolls_back(self):
        book = CountingBook("vault", verbose=False)
        vault = fund_all(create_reported_vault(make_config(), book=book))
        before = capture_state(vault)
        with pytest.raises(Unauthorized):
            vault.ledger.set_portfolio_value("mallory", 1)
        assert capture_state(vault) == before
        assert book.snapshots == 1

    def test_distinct_participants(self, reported):
        participants = reported.ledger._participants()
        assert participants.count(reported.book) == 1
        assert reported.registry in participants
        assert reported.events in participants


class TestVerbose:

    def test_prints_result_lines(self, capsys):
        vault = fund_all(create_permissioned_vault(make_config(), verbose=True))
        capsys.readouterr()
        vault.ledger.add_to_whitelist(ADMIN, "alice")
        vault.ledger.set_portfolio_value(ADMIN, 1_000)
        vault.ledger.deposit("alice", 100)
        vault.ledger.withdraw("alice", 10)
        out = capsys.readouterr().out
        assert "✓ WHITELIST alice=True" in out
        assert "✓ PORTFOLIO VALUE 1000" in out
        assert "✓ DEPOSIT alice: 100 -> 100 shares" in out
        assert "✓ WITHDRAW alice: 10 shares -> 100 owed" in out

    def test_prints_revert(self, capsys):
        vault = create_reported_vault(make_config(), verbose=True)
        capsys.readouterr()
        with pytest.raises(ExternalTransferFailed):
            vault.ledger.deposit("alice", 100)
        assert "✗ DEPOSIT reverted: ExternalTransferFailed" in capsys.readouterr().out

    def test_quiet_by_default(self, reported, capsys):
        reported.ledger.deposit("alice", 100)
        assert capsys.readouterr().out == ""

