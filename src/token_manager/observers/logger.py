"""Diagnostic dump of token state after every mutation.

Uses the standard ``logging`` module with the ``"token_manager"`` logger.
No ``print()`` statements. Supports three verbosity levels and an
in-memory diagnostic mode for post-hoc analysis.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from token_manager.config import TokenManagerConfig
    from token_manager.observers.types import TokenEvent

logger = logging.getLogger("token_manager")

_DUMP_LEVELS = frozenset({"none", "summary", "full"})


class TokenDumpLogger:
    """Per-operation token dump.

    Dump levels:
        ``"none"``: No logging output. Events are still stored if
        ``diagnostic_mode=True``.

        ``"summary"``: One line per event with the operation, id, domain
        and selection state.

        ``"full"``: JSON dump of the token fields and every live id.
    """

    def __init__(self, config: TokenManagerConfig) -> None:
        """Initialize the dump logger from configuration.

        Args:
            config: Configuration providing ``dump_level`` and ``diagnostic_mode``.
        """
        if config.dump_level not in _DUMP_LEVELS:
            logger.warning("Unknown dump_level %r, using 'summary'", config.dump_level)
            self._dump_level = "summary"
        else:
            self._dump_level = config.dump_level
        self._diagnostic_mode = config.diagnostic_mode
        self._events: list[TokenEvent] = []

    def on_token_event(self, event: TokenEvent) -> None:
        """Dump a single table event.

        Args:
            event: Immutable record of the operation that just succeeded.
        """
        if self._diagnostic_mode:
            self._events.append(event)

        if self._dump_level == "none":
            return

        if self._dump_level == "summary":
            token = event.token
            if token is None:
                logger.info(
                    "op=%s id=%s live=%d",
                    event.operation,
                    event.token_id,
                    len(event.live_ids),
                )
            else:
                logger.info(
                    "op=%s id=%s name=%r domain=[%d,%d,%d) partial=%d final=%d live=%d",
                    event.operation,
                    event.token_id,
                    token.name,
                    token.low,
                    token.mid,
                    token.high,
                    token.partial,
                    token.final,
                    len(event.live_ids),
                )
        elif self._dump_level == "full":
            logger.info("token_event: %s", json.dumps(asdict(event), default=str))

    def get_diagnostic_data(self) -> list[TokenEvent]:
        """Return all stored events (requires ``diagnostic_mode=True``)."""
        return list(self._events)

    def get_summary_stats(self) -> dict[str, Any]:
        """Compute counts over all stored events.

        Returns:
            Dictionary with per-operation counts and the number of
            decision phases that overrode the threshold, or an empty dict
            if no events were stored.
        """
        if not self._events:
            return {}

        counts = Counter(e.operation for e in self._events)
        reads = [e.token for e in self._events if e.operation == "read" and e.token is not None]
        overrides = sum(1 for t in reads if t.final != t.partial)
        return {
            "total_events": len(self._events),
            "creates": counts["create"],
            "writes": counts["write"],
            "reads": counts["read"],
            "drops": counts["drop"],
            "decision_overrides": overrides,
            "override_rate": overrides / len(reads) if reads else 0.0,
            "max_live_tokens": max(len(e.live_ids) for e in self._events),
        }
