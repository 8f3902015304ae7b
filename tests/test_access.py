"""
test_access.py - Unit tests for access.py

Tests:
- Seeding and role checks
- Grant / revoke authorization
- Self-revocation and lockout
- snapshot() / restore()
"""

import pytest

from vault import AccessRegistry, Role, Unauthorized


class TestSeeding:

    def test_seed_admin(self):
        registry = AccessRegistry("admin")
        assert registry.is_authorized("admin", Role.ADMIN)
        assert registry.members(Role.ADMIN) == frozenset({"admin"})
        assert registry.members(Role.DEPOSITOR) == frozenset()

    def test_empty_seed_raises(self):
        with pytest.raises(ValueError):
            AccessRegistry("")

    def test_admin_is_not_implicitly_a_depositor(self):
        assert not AccessRegistry("admin").is_authorized("admin", Role.DEPOSITOR)


class TestGrantRevoke:

    def test_admin_grants_depositor(self):
        registry = AccessRegistry("admin")
        registry.grant("admin", "alice", Role.DEPOSITOR)
        assert registry.is_authorized("alice", Role.DEPOSITOR)
        assert not registry.is_authorized("alice", Role.ADMIN)

    def test_grant_is_idempotent(self):
        registry = AccessRegistry("admin")
        registry.grant("admin", "alice", Role.DEPOSITOR)
        registry.grant("admin", "alice", Role.DEPOSITOR)
        assert registry.members(Role.DEPOSITOR) == frozenset({"alice"})

    def test_revoke_missing_member_is_noop(self):
        registry = AccessRegistry("admin")
        registry.revoke("admin", "alice", Role.DEPOSITOR)
        assert registry.members(Role.DEPOSITOR) == frozenset()

    def test_non_admin_cannot_grant(self):
        registry = AccessRegistry("admin")
        registry.grant("admin", "alice", Role.DEPOSITOR)
        with pytest.raises(Unauthorized):
            registry.grant("alice", "bob", Role.DEPOSITOR)
        assert not registry.is_authorized("bob", Role.DEPOSITOR)

    def test_non_admin_cannot_revoke(self):
        registry = AccessRegistry("admin")
        with pytest.raises(Unauthorized):
            registry.revoke("mallory", "admin", Role.ADMIN)
        assert registry.is_authorized("admin", Role.ADMIN)

    def test_promoted_admin_can_administer(self):
        registry = AccessRegistry("admin")
        registry.grant("admin", "ops", Role.ADMIN)
        registry.grant("ops", "alice", Role.DEPOSITOR)
        assert registry.is_authorized("alice", Role.DEPOSITOR)

    def test_role_given_by_value(self):
        registry = AccessRegistry("admin")
        registry.grant("admin", "alice", "depositor")
        assert registry.is_authorized("alice", Role.DEPOSITOR)


class TestLockout:
    """An Admin may remove themselves, with no last-admin protection."""

    def test_self_revoke_with_another_admin(self):
        registry = AccessRegistry("admin")
        registry.grant("admin", "ops", Role.ADMIN)
        registry.revoke("admin", "admin", Role.ADMIN)
        assert registry.members(Role.ADMIN) == frozenset({"ops"})

    def test_last_admin_self_revoke_locks_registry(self):
        registry = AccessRegistry("admin")
        registry.revoke("admin", "admin", Role.ADMIN)
        assert registry.members(Role.ADMIN) == frozenset()
        with pytest.raises(Unauthorized):
            registry.grant("admin", "admin", Role.ADMIN)


class TestSnapshot:

    def test_restore_puts_memberships_back(self):
        registry = AccessRegistry("admin")
        saved = registry.snapshot()
        registry.grant("admin", "alice", Role.DEPOSITOR)
        registry.revoke("admin", "admin", Role.ADMIN)
        registry.restore(saved)
        assert registry.members(Role.ADMIN) == frozenset({"admin"})
        assert registry.members(Role.DEPOSITOR) == frozenset()

    def test_members_is_a_copy(self):
        registry = AccessRegistry("admin")
        members = registry.members(Role.ADMIN)
        assert isinstance(members, frozenset)
        registry.grant("admin", "ops", Role.ADMIN)
        assert members == frozenset({"admin"})
