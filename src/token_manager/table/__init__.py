"""Token table subsystem for token-manager.

The entity model, the lock strategies guarding shared state, and the
table that drives the selection algorithm on write and read.
"""

from token_manager.table.locking import (
    GlobalLockStrategy,
    LockStrategy,
    LockStrategyRegistry,
    PerTokenLockStrategy,
)
from token_manager.table.table import TokenTable
from token_manager.table.types import Domain, Token, TokenSnapshot, TokenState

__all__ = [
    "Domain",
    "GlobalLockStrategy",
    "LockStrategy",
    "LockStrategyRegistry",
    "PerTokenLockStrategy",
    "Token",
    "TokenSnapshot",
    "TokenState",
    "TokenTable",
]
