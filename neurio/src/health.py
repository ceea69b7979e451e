"""
Health file writer for the Neurio daemon.

Writes a JSON health file after every poll cycle with:
- last_poll_ts: ISO timestamp of the most recent poll cycle.
- last_outcome: outcome name of that cycle (``ok``, ``transport_failure``...).
- last_success_ts: ISO timestamp of the most recent fully processed cycle.
- consecutive_failures: cycles in a row that did not end in ``ok``.

A monitoring check can alert on a stale ``last_success_ts`` or a growing
``consecutive_failures``. Write errors are logged, never raised, so the
health file can never break the poll loop.

CHANGELOG:
- 2026-03-05: Initial creation (STORY-108)

TODO:
- None
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)


class HealthWriter:
    """Tracks poll outcomes and mirrors them to a JSON file.

    Args:
        path: Filesystem path for the health JSON file. Accepts str or Path.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._last_poll_ts: str | None = None
        self._last_outcome: str | None = None
        self._last_success_ts: str | None = None
        self._consecutive_failures: int = 0

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    def record_cycle(self, outcome: str, ok: bool) -> None:
        """Record one poll cycle and write the health file.

        Args:
            outcome: Name of the cycle outcome.
            ok: Whether the cycle fetched and extracted successfully.
        """
        now = datetime.now(tz=UTC).isoformat()
        self._last_poll_ts = now
        self._last_outcome = outcome
        if ok:
            self._last_success_ts = now
            self._consecutive_failures = 0
        else:
            self._consecutive_failures += 1
        self._write()

    def _write(self) -> None:
        data = {
            "last_poll_ts": self._last_poll_ts,
            "last_outcome": self._last_outcome,
            "last_success_ts": self._last_success_ts,
            "consecutive_failures": self._consecutive_failures,
        }
        try:
            self.path.write_text(json.dumps(data), encoding="utf-8")
        except OSError:
            logger.warning(
                "Health check: failed to write health file %s",
                self.path,
                exc_info=True,
            )
