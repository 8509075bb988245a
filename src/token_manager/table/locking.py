"""Lock strategies guarding the shared token table.

Two built-in strategies register themselves with ``LockStrategyRegistry``:

- ``global``: one lock held for every operation, scans included.
- ``per_token``: a short-lived table lock guards the id map and each token's
  own lock is held for its whole read-modify-write. Operations on distinct
  ids proceed in parallel.

Lock order is always token lock, then table lock. The table lock is never
held while waiting for a token lock.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, ClassVar

from token_manager.exceptions import ConfigValidationError, TokenNotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from token_manager.table.types import Token


class LockStrategy(ABC):
    """Abstract base for table concurrency control."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry identifier of the strategy."""

    @abstractmethod
    def guard_table(self) -> Any:
        """Context manager giving exclusive access to the id map."""

    @abstractmethod
    def guard_token(self, tokens: dict[str, Token], token_id: str, operation: str) -> Any:
        """Context manager yielding the live token with exclusive access to it.

        Args:
            tokens: The table's id map.
            token_id: Id to look up.
            operation: Operation name, used in the NotFound message.

        Raises:
            TokenNotFoundError: If *token_id* is absent, or was dropped while
                the caller waited for it.
        """


class LockStrategyRegistry:
    """Registry mapping ``lock_mode`` names to LockStrategy classes."""

    _registry: ClassVar[dict[str, type[LockStrategy]]] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[type[LockStrategy]], type[LockStrategy]]:
        """Decorator that registers a LockStrategy class under *name*.

        Raises:
            ValueError: If *name* is already registered.
        """

        def decorator(klass: type[LockStrategy]) -> type[LockStrategy]:
            if name in cls._registry:
                raise ValueError(f"Lock strategy '{name}' is already registered")
            cls._registry[name] = klass
            return klass

        return decorator

    @classmethod
    def get(cls, name: str) -> type[LockStrategy]:
        """Return the strategy class registered under *name*.

        Raises:
            ConfigValidationError: If *name* is not registered.
        """
        if name not in cls._registry:
            available = ", ".join(sorted(cls._registry)) or "(none)"
            raise ConfigValidationError(f"Unknown lock mode '{name}'. Available: {available}")
        return cls._registry[name]

    @classmethod
    def build(cls, config: Any) -> LockStrategy:
        """Instantiate the strategy named by ``config.lock_mode``."""
        return cls.get(config.lock_mode)()

    @classmethod
    def list_registered(cls) -> list[str]:
        """Return sorted list of registered strategy names."""
        return sorted(cls._registry)


@LockStrategyRegistry.register("global")
class GlobalLockStrategy(LockStrategy):
    """Serialize every table operation behind one lock.

    The lock is re-entrant so that an operation already holding it may
    touch the id map again (drop, live-id snapshots).
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return "global"

    @contextmanager
    def guard_table(self) -> Iterator[None]:
        with self._lock:
            yield

    @contextmanager
    def guard_token(self, tokens: dict[str, Token], token_id: str, operation: str) -> Iterator[Token]:
        with self._lock:
            token = tokens.get(token_id)
            if token is None:
                raise TokenNotFoundError(token_id, operation)
            yield token


@LockStrategyRegistry.register("per_token")
class PerTokenLockStrategy(LockStrategy):
    """Lock the id map briefly and each token for its whole operation."""

    def __init__(self) -> None:
        self._table_lock = threading.Lock()

    @property
    def name(self) -> str:
        return "per_token"

    @contextmanager
    def guard_table(self) -> Iterator[None]:
        with self._table_lock:
            yield

    @contextmanager
    def guard_token(self, tokens: dict[str, Token], token_id: str, operation: str) -> Iterator[Token]:
        with self._table_lock:
            token = tokens.get(token_id)
        if token is None:
            raise TokenNotFoundError(token_id, operation)
        with token.lock:
            # The token may have been dropped (and the id even recreated)
            # while we waited for its lock.
            with self._table_lock:
                current = tokens.get(token_id)
            if current is not token:
                raise TokenNotFoundError(token_id, operation)
            yield token
