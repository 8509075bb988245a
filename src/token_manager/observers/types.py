"""Data types for the post-operation observer hook."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from token_manager.table.types import TokenSnapshot


@dataclass(frozen=True, slots=True)
class TokenEvent:
    """Immutable record of one successful table mutation.

    Built while the operation still holds its lock, so ``token`` and
    ``live_ids`` describe one consistent state of the table.

    Attributes:
        operation: ``'create'``, ``'write'``, ``'read'`` or ``'drop'``.
        token_id: Id the operation acted on.
        token: Snapshot of the token after the operation; ``None`` after drop.
        live_ids: Every id present in the table after the operation.
        timestamp_ns: Wall-clock time the event was recorded.
    """

    operation: str
    token_id: str
    token: TokenSnapshot | None
    live_ids: tuple[str, ...]
    timestamp_ns: int


class TokenObserver(Protocol):
    """Anything that wants to hear about successful table mutations."""

    def on_token_event(self, event: TokenEvent) -> None:
        """Handle one event. Must not call back into the table."""
