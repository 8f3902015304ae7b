"""
guard.py - Contract-wide mutual exclusion for state-mutating calls

One ReentrancyGuard is owned by each share ledger instance. Entering it while
it is already held raises ReentrantCall immediately; leaving it always
releases, whether the body returned or raised.
"""

from __future__ import annotations
from typing import Optional

from .core import ReentrantCall


class ReentrancyGuard:
    """
    Non-reentrant critical section.

    Example:
        guard = ReentrancyGuard()
        with guard.hold("deposit"):
            with guard.hold("deposit"):   # raises ReentrantCall
                ...
    """

    def __init__(self):
        self._held_by: Optional[str] = None

    @property
    def locked(self) -> bool:
        return self._held_by is not None

    def hold(self, operation: str) -> "_Hold":
        return _Hold(self, operation)

    def acquire(self, operation: str) -> None:
        if self._held_by is not None:
            raise ReentrantCall(f"{operation} entered while {self._held_by} is in flight")
        self._held_by = operation

    def release(self) -> None:
        self._held_by = None


class _Hold:
    __slots__ = ("guard", "operation")

    def __init__(self, guard: ReentrancyGuard, operation: str):
        self.guard = guard
        self.operation = operation

    def __enter__(self):
        self.guard.acquire(self.operation)
        return self.guard

    def __exit__(self, exc_type, exc, tb):
        self.guard.release()
        return False
