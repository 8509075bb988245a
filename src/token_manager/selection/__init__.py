"""Selection subsystem for token-manager.

Observation and decision scans over a partitioned index domain, driven by
SHA-256 derived priorities.
"""

from token_manager.selection.selector import TwoPhaseSelector
from token_manager.selection.types import ScanResult

__all__ = [
    "ScanResult",
    "TwoPhaseSelector",
]
