"""Post-operation observer hook for token-manager.

Provides immutable per-operation event records and the diagnostic dump
logger that replaces console dumps of token state.
"""

from token_manager.observers.logger import TokenDumpLogger
from token_manager.observers.types import TokenEvent, TokenObserver

__all__ = [
    "TokenDumpLogger",
    "TokenEvent",
    "TokenObserver",
]
