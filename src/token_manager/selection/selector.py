"""Two-phase threshold selection driven by hash priorities.

Observation phase:
    Scan ``[low, mid)`` and keep the index with the lowest priority. That
    index becomes ``partial`` and its priority the threshold.

Decision phase:
    Scan ``[mid, high)`` the same way. The best candidate replaces
    ``partial`` only if its priority is strictly below the threshold;
    otherwise ``final = partial``.

Domain bounds are never validated. Inverted ranges are simply empty.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from token_manager.exceptions import OperationAbortedError
from token_manager.hashing import MAX_PRIORITY, priority
from token_manager.selection.types import ScanResult

if TYPE_CHECKING:
    from collections.abc import Callable


class TwoPhaseSelector:
    """Stateless secretary-style selector.

    All methods depend only on their arguments, making the selector safe
    for concurrent use from any number of request threads.
    """

    @staticmethod
    def scan_minimum(
        name: str,
        start: int,
        stop: int,
        should_abort: Callable[[], bool] | None = None,
    ) -> ScanResult:
        """Find the earliest index with the minimum priority in ``[start, stop)``.

        Indices are visited in increasing order and the running best is
        replaced only on a strictly smaller priority, so ties keep the
        earliest index.

        Args:
            name: Token name salting the hash.
            start: First index (inclusive).
            stop: End of the range (exclusive).
            should_abort: Optional callable checked before every hash
                computation. Returning ``True`` abandons the scan.

        Returns:
            ScanResult. For an empty range: ``(start, MAX_PRIORITY, 0)``.

        Raises:
            OperationAbortedError: If *should_abort* fired mid-scan.
        """
        best_index = start
        best_priority = MAX_PRIORITY
        scanned = 0
        for index in range(start, stop):
            if should_abort is not None and should_abort():
                raise OperationAbortedError(
                    f"scan of [{start}, {stop}) abandoned after {scanned} hashes"
                )
            value = priority(name, index)
            scanned += 1
            if value < best_priority:
                best_index = index
                best_priority = value
        return ScanResult(index=best_index, priority=best_priority, scanned=scanned)

    def observe(
        self,
        name: str,
        low: int,
        mid: int,
        should_abort: Callable[[], bool] | None = None,
    ) -> int:
        """Run the observation phase over ``[low, mid)``.

        Args:
            name: Token name.
            low: Lower bound of the observation range (inclusive).
            mid: Upper bound of the observation range (exclusive).
            should_abort: Optional cancellation check.

        Returns:
            The selected ``partial`` index; ``low`` if the range is empty.
        """
        return self.scan_minimum(name, low, mid, should_abort).index

    def decide(
        self,
        name: str,
        mid: int,
        high: int,
        partial: int,
        should_abort: Callable[[], bool] | None = None,
    ) -> int:
        """Run the decision phase over ``[mid, high)`` against *partial*.

        Args:
            name: Token name.
            mid: Lower bound of the decision range (inclusive).
            high: Upper bound of the decision range (exclusive).
            partial: Index chosen by the observation phase.
            should_abort: Optional cancellation check.

        Returns:
            The best decision-range index if its priority is strictly lower
            than ``priority(name, partial)``, otherwise *partial*.
        """
        candidate = self.scan_minimum(name, mid, high, should_abort)
        threshold = priority(name, partial)
        if candidate.priority < threshold:
            return candidate.index
        return partial
