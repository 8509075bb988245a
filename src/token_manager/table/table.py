"""The authoritative in-memory token table.

Every public operation is atomic with respect to other operations on the
same id: the existence check, the scan and the store happen under one
lock acquisition, so no caller ever observes a half-updated token. The
scan result is computed into locals and committed only once the scan
completes, so an aborted or failed operation leaves the table unchanged.

Observers are notified after the lock is released, with an event built
while it was still held.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from token_manager.exceptions import TokenAlreadyExistsError
from token_manager.observers.types import TokenEvent
from token_manager.selection.selector import TwoPhaseSelector
from token_manager.table.locking import PerTokenLockStrategy
from token_manager.table.types import Domain, Token, TokenState

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from token_manager.observers.types import TokenObserver
    from token_manager.table.locking import LockStrategy
    from token_manager.table.types import TokenSnapshot

logger = logging.getLogger("token_manager")


class TokenTable:
    """Id-keyed collection of tokens with create/write/read/drop.

    Args:
        lock_strategy: Concurrency control. Defaults to per-token locking.
        selector: Selection algorithm. Defaults to ``TwoPhaseSelector()``.
        observers: Post-operation hooks notified after each success.
    """

    def __init__(
        self,
        lock_strategy: LockStrategy | None = None,
        selector: TwoPhaseSelector | None = None,
        observers: Iterable[TokenObserver] = (),
    ) -> None:
        self._tokens: dict[str, Token] = {}
        self._locks = lock_strategy if lock_strategy is not None else PerTokenLockStrategy()
        self._selector = selector if selector is not None else TwoPhaseSelector()
        self._observers: list[TokenObserver] = list(observers)

    @property
    def lock_mode(self) -> str:
        """Name of the active lock strategy."""
        return self._locks.name

    def add_observer(self, observer: TokenObserver) -> None:
        """Register a post-operation hook."""
        self._observers.append(observer)

    # --- Operations ---

    def create(self, token_id: str) -> bool:
        """Insert a zero-valued token under *token_id*.

        Raises:
            TokenAlreadyExistsError: If *token_id* is already present.
        """
        with self._locks.guard_table():
            if token_id in self._tokens:
                raise TokenAlreadyExistsError(token_id, "create")
            token = Token(id=token_id)
            self._tokens[token_id] = token
            event = self._event("create", token_id, token, tuple(self._tokens))
        self._notify(event)
        return True

    def write(
        self,
        token_id: str,
        name: str,
        low: int,
        mid: int,
        high: int,
        should_abort: Callable[[], bool] | None = None,
    ) -> int:
        """Set name and domain, then run the observation phase.

        Fully replaces any earlier name, domain and selection state; ``final``
        is reset to 0.

        Args:
            token_id: Id of an existing token.
            name: Hash salt. Any string, including empty.
            low: Observation range start.
            mid: Observation range end and decision range start.
            high: Decision range end.
            should_abort: Optional cancellation check between hashes.

        Returns:
            The new ``partial`` index.

        Raises:
            TokenNotFoundError: If *token_id* is absent.
            OperationAbortedError: If the scan was abandoned.
        """
        with self._locks.guard_token(self._tokens, token_id, "write") as token:
            partial = self._selector.observe(name, low, mid, should_abort)
            token.name = name
            token.domain = Domain(low=low, mid=mid, high=high)
            token.state = TokenState(partial=partial, final=0)
            event = self._event("write", token_id, token, self._live_ids())
        self._notify(event)
        return partial

    def read(self, token_id: str, should_abort: Callable[[], bool] | None = None) -> int:
        """Run the decision phase against the token's current state.

        A token that was never written still has ``partial == 0`` and an
        all-zero domain; the decision phase runs against that state.

        Returns:
            The new ``final`` index.

        Raises:
            TokenNotFoundError: If *token_id* is absent.
            OperationAbortedError: If the scan was abandoned.
        """
        with self._locks.guard_token(self._tokens, token_id, "read") as token:
            final = self._selector.decide(
                token.name,
                token.domain.mid,
                token.domain.high,
                token.state.partial,
                should_abort,
            )
            token.state = TokenState(partial=token.state.partial, final=final)
            event = self._event("read", token_id, token, self._live_ids())
        self._notify(event)
        return final

    def drop(self, token_id: str) -> bool:
        """Remove *token_id* from the table.

        Raises:
            TokenNotFoundError: If *token_id* is absent.
        """
        with self._locks.guard_token(self._tokens, token_id, "drop"):
            with self._locks.guard_table():
                del self._tokens[token_id]
                live_ids = tuple(self._tokens)
            event = self._event("drop", token_id, None, live_ids)
        self._notify(event)
        return True

    # --- Inspection ---

    def get(self, token_id: str) -> TokenSnapshot:
        """Return an immutable snapshot of *token_id*.

        Raises:
            TokenNotFoundError: If *token_id* is absent.
        """
        with self._locks.guard_token(self._tokens, token_id, "get") as token:
            return token.snapshot()

    def ids(self) -> list[str]:
        """Return every live id in insertion order."""
        return list(self._live_ids())

    def __len__(self) -> int:
        with self._locks.guard_table():
            return len(self._tokens)

    def __contains__(self, token_id: object) -> bool:
        with self._locks.guard_table():
            return token_id in self._tokens

    # --- Internals ---

    def _live_ids(self) -> tuple[str, ...]:
        with self._locks.guard_table():
            return tuple(self._tokens)

    @staticmethod
    def _event(
        operation: str,
        token_id: str,
        token: Token | None,
        live_ids: tuple[str, ...],
    ) -> TokenEvent:
        return TokenEvent(
            operation=operation,
            token_id=token_id,
            token=token.snapshot() if token is not None else None,
            live_ids=live_ids,
            timestamp_ns=time.time_ns(),
        )

    def _notify(self, event: TokenEvent) -> None:
        for observer in self._observers:
            try:
                observer.on_token_event(event)
            except Exception:  # Intentional: observer errors are logged only
                logger.warning(
                    "Observer %r failed on %s of %r",
                    observer,
                    event.operation,
                    event.token_id,
                    exc_info=True,
                )
