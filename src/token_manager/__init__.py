"""token-manager: a gRPC token-state service for two-phase hash selection.

Clients create a token, write a name and a partitioned domain to it (the
observation phase picks the lowest-priority index in ``[low, mid)``), read
it (the decision phase replaces that pick only with a strictly better index
from ``[mid, high)``) and finally drop it. Priorities are the first 8 bytes
of ``SHA-256("<name> <index>")``, so any party can recompute them.
"""

from __future__ import annotations

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("token-manager")
except PackageNotFoundError:
    __version__ = "0.0.0"

from token_manager.config import TokenManagerConfig, resolve_config
from token_manager.exceptions import (
    ConfigValidationError,
    OperationAbortedError,
    TokenAlreadyExistsError,
    TokenManagerError,
    TokenNotFoundError,
)
from token_manager.hashing import MAX_PRIORITY, priority
from token_manager.table.table import TokenTable

__all__ = [
    "MAX_PRIORITY",
    "ConfigValidationError",
    "OperationAbortedError",
    "TokenAlreadyExistsError",
    "TokenManagerConfig",
    "TokenManagerError",
    "TokenNotFoundError",
    "TokenTable",
    "__version__",
    "priority",
    "resolve_config",
]
