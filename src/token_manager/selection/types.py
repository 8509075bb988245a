"""Data types for the selection subsystem."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Result of a minimum-priority scan over a half-open index range.

    Attributes:
        index: Earliest index attaining the minimum priority, or the range
            start if the range was empty.
        priority: Minimum priority seen, or ``MAX_PRIORITY`` if the range
            was empty.
        scanned: Number of hash computations performed.
    """

    index: int
    priority: int
    scanned: int
