"""
access.py - AccessRegistry for privileged and allowed principals

Pure set operations over two roles:
- Role.ADMIN: may grant and revoke either role
- Role.DEPOSITOR: may deposit into a permissioned share ledger

There is deliberately no last-admin protection. An Admin can revoke their own
Admin role, and if no other Admin exists the registry is locked for good.
"""

from __future__ import annotations
from typing import Dict, FrozenSet, Set

from .core import Principal, Role, Unauthorized


class AccessRegistry:
    """
    Mapping of principals to roles, seeded with one Admin.

    Example:
        registry = AccessRegistry("admin")
        registry.grant("admin", "alice", Role.DEPOSITOR)
        registry.is_authorized("alice", Role.DEPOSITOR)   # True
        registry.grant("alice", "bob", Role.DEPOSITOR)    # raises Unauthorized
    """

    def __init__(self, seed_admin: Principal):
        if not seed_admin or not seed_admin.strip():
            raise ValueError("seed_admin cannot be empty")
        self._members: Dict[Role, Set[Principal]] = {role: set() for role in Role}
        self._members[Role.ADMIN].add(seed_admin)

    def _require_admin(self, actor: Principal) -> None:
        if actor not in self._members[Role.ADMIN]:
            raise Unauthorized(f"{actor} is not an admin")

    def grant(self, actor: Principal, target: Principal, role: Role) -> None:
        """Add `target` to `role`. Granting an existing membership is a no-op."""
        self._require_admin(actor)
        self._members[Role(role)].add(target)

    def revoke(self, actor: Principal, target: Principal, role: Role) -> None:
        """Remove `target` from `role`. An Admin may revoke themselves."""
        self._require_admin(actor)
        self._members[Role(role)].discard(target)

    def is_authorized(self, principal: Principal, role: Role) -> bool:
        return principal in self._members[Role(role)]

    def members(self, role: Role) -> FrozenSet[Principal]:
        return frozenset(self._members[Role(role)])

    def snapshot(self) -> Dict[Role, FrozenSet[Principal]]:
        return {role: frozenset(members) for role, members in self._members.items()}

    def restore(self, snapshot: Dict[Role, FrozenSet[Principal]]) -> None:
        self._members = {role: set(members) for role, members in snapshot.items()}

    def __repr__(self):
        counts = ", ".join(f"{role.value}={len(m)}" for role, m in self._members.items())
        return f"AccessRegistry({counts})"
