"""Entity model for the token table."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Domain:
    """Partition bounds ``low <= mid <= high`` (ordering is never enforced).

    ``[low, mid)`` is the observation range and ``[mid, high)`` the decision
    range.
    """

    low: int = 0
    mid: int = 0
    high: int = 0


@dataclass(frozen=True, slots=True)
class TokenState:
    """Derived selection state. Never supplied by callers."""

    partial: int = 0
    final: int = 0


@dataclass(frozen=True, slots=True)
class TokenSnapshot:
    """Immutable copy of a token, safe to hand out past a single operation.

    Attributes:
        id: Primary key in the table.
        name: Hash salt set by the last write (empty until written).
        low: Observation range start.
        mid: Observation range end / decision range start.
        high: Decision range end.
        partial: Observation-phase selection.
        final: Decision-phase selection (0 until read after a write).
    """

    id: str
    name: str
    low: int
    mid: int
    high: int
    partial: int
    final: int


@dataclass(slots=True)
class Token:
    """Live per-id record owned exclusively by ``TokenTable``.

    The ``lock`` serializes read-modify-write sequences on this token when
    the table runs with per-token locking.
    """

    id: str
    name: str = ""
    domain: Domain = field(default_factory=Domain)
    state: TokenState = field(default_factory=TokenState)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def snapshot(self) -> TokenSnapshot:
        """Return an immutable copy of the current fields."""
        return TokenSnapshot(
            id=self.id,
            name=self.name,
            low=self.domain.low,
            mid=self.domain.mid,
            high=self.domain.high,
            partial=self.state.partial,
            final=self.state.final,
        )
