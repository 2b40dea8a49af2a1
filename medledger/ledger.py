"""Shared execution context: clock, authorization and event log."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional

Authorizer = Callable[[Hashable], bool]


class AuthorizationError(PermissionError):
    """Raised when an address fails to authorize an operation."""

    def __init__(self, address: Hashable) -> None:
        super().__init__(f"authorization denied for {address!r}")
        self.address = address


@dataclass(frozen=True)
class Event:
    """A published event: a tuple of topics and an arbitrary payload."""

    topics: tuple
    data: Any


class Ledger:
    """Clock, authorization checks and event log shared by the registries.

    Without an authorizer every address is considered to have signed.
    """

    def __init__(self, timestamp: int = 0, authorizer: Optional[Authorizer] = None) -> None:
        if timestamp < 0:
            raise ValueError("timestamp must not be negative")
        self.timestamp = timestamp
        self.authorizer = authorizer
        self.events: list[Event] = []
        self.authorized: list[Hashable] = []

    def require_auth(self, address: Hashable) -> None:
        """Check that ``address`` authorized the current call."""
        if self.authorizer is not None and not self.authorizer(address):
            raise AuthorizationError(address)
        self.authorized.append(address)

    def publish(self, topics: tuple, data: Any) -> Event:
        """Record an event and return it."""
        event = Event(tuple(topics), data)
        self.events.append(event)
        return event

    def advance(self, seconds: int) -> int:
        """Move the clock forward and return the new timestamp."""
        if seconds < 0:
            raise ValueError("cannot move the clock backwards")
        self.timestamp += seconds
        return self.timestamp