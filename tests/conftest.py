"""
conftest.py - Shared pytest fixtures for share ledger tests

Provides common fixtures used across unit, conformance and functional tests:
- One vault per variant, with funded depositors
- A parametrized fixture that runs a test against every variant
"""

import pytest
from vault import (
    Vault,
    create_self_custodial_vault,
    create_reported_vault,
    create_permissioned_vault,
)

from tests.vault_helpers import ADMIN, DEPOSITORS, make_config, fund_all


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def self_custodial() -> Vault:
    """Variant A with funded depositors."""
    return fund_all(create_self_custodial_vault(make_config()))


@pytest.fixture
def reported() -> Vault:
    """Variant B with funded depositors."""
    return fund_all(create_reported_vault(make_config()))


@pytest.fixture
def permissioned() -> Vault:
    """Variant C with funded depositors; only alice is whitelisted."""
    vault = fund_all(create_permissioned_vault(make_config()))
    vault.ledger.add_to_whitelist(ADMIN, "alice")
    return vault


@pytest.fixture(params=["self_custodial", "reported", "permissioned"])
def any_vault(request) -> Vault:
    """Each variant in turn, with every depositor whitelisted where that matters."""
    vault = request.getfixturevalue(request.param)
    if vault.ledger.permissioned:
        for principal in DEPOSITORS:
            vault.ledger.add_to_whitelist(ADMIN, principal)
    return vault
