"""
events.py - Append-only notification stream

Events are just data; consumers are off-ledger processes that read the stream
by cursor. Nothing here dispatches handlers, so an event emitted inside a call
that is later rolled back is never seen by anyone.

Core concepts:
1. Event: Immutable record of something that happened (name + params)
2. EventLog: Ordered, append-only sink with cursor reads
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from .core import LedgerView

# Event names emitted by the share ledger
DEPOSIT = "Deposit"
WITHDRAWAL_REQUEST = "WithdrawalRequest"
PORTFOLIO_VALUE_SET = "PortfolioValueSet"
WHITELISTED = "Whitelisted"
ADMIN_SET = "AdminSet"


@dataclass(frozen=True, slots=True)
class Event:
    """
    Immutable notification.

    Attributes:
        sequence: Position in the stream (0-based, gapless)
        name: Event type string ("Deposit", "WithdrawalRequest", ...)
        params: Event-specific parameters as frozen tuple of (key, value) pairs
        timestamp: Logical time of the emitting book, if one was attached
    """
    sequence: int
    name: str
    params: tuple = ()
    timestamp: Optional[datetime] = None

    @property
    def params_dict(self) -> Dict[str, Any]:
        """Get params as a dictionary for convenience."""
        return dict(self.params)

    def __getitem__(self, key: str) -> Any:
        return self.params_dict[key]

    @property
    def event_id(self) -> str:
        params_str = "|".join(f"{k}={v}" for k, v in sorted(self.params))
        return f"{self.sequence}:{self.name}:{params_str}"


class EventLog:
    """
    Ordered, append-only event sink.

    Example:
        log = EventLog()
        log.emit("WithdrawalRequest", principal="alice", amount=500, shares=50)
        cursor = 0
        for event in log.read(cursor, name="WithdrawalRequest"):
            ...
            cursor = event.sequence + 1
    """

    def __init__(self, clock: Optional[LedgerView] = None):
        self._events: List[Event] = []
        self._clock = clock

    def emit(self, name: str, **params: Any) -> Event:
        """Append an event and return it."""
        event = Event(
            sequence=len(self._events),
            name=name,
            params=tuple(sorted(params.items())),
            timestamp=self._clock.current_time if self._clock is not None else None,
        )
        self._events.append(event)
        return event

    def read(self, cursor: int = 0, name: Optional[str] = None) -> List[Event]:
        """Events with sequence >= cursor, optionally filtered by name, in order."""
        events = self._events[cursor:]
        if name is not None:
            events = [e for e in events if e.name == name]
        return events

    def last(self, name: Optional[str] = None) -> Optional[Event]:
        events = self.read(name=name)
        return events[-1] if events else None

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def snapshot(self) -> int:
        return len(self._events)

    def restore(self, snapshot: int) -> None:
        del self._events[snapshot:]

    def __repr__(self):
        return f"EventLog({len(self._events)} events)"
