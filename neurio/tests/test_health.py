"""
Unit tests for the health writer module (STORY-108).

Tests verify:
- record_cycle() writes health.json with all four fields.
- Successful cycles set last_success_ts and reset consecutive_failures.
- Failed cycles increment consecutive_failures and keep last_success_ts.
- An unwritable path is logged, never raised.

CHANGELOG:
- 2026-03-05: Initial creation (STORY-108)

TODO:
- None
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from neurio.src.health import HealthWriter


class TestRecordCycle:
    """record_cycle() updates and writes the health file."""

    def test_writes_all_fields(self, tmp_path: Path) -> None:
        """The file always contains the four health fields."""
        path = tmp_path / "health.json"
        HealthWriter(path).record_cycle("ok", True)

        data = json.loads(path.read_text())
        assert set(data) == {
            "last_poll_ts",
            "last_outcome",
            "last_success_ts",
            "consecutive_failures",
        }
        assert "T" in data["last_poll_ts"]

    def test_success(self, tmp_path: Path) -> None:
        """An ok cycle records a success timestamp."""
        path = tmp_path / "health.json"
        HealthWriter(path).record_cycle("ok", True)

        data = json.loads(path.read_text())
        assert data["last_outcome"] == "ok"
        assert data["last_success_ts"] == data["last_poll_ts"]
        assert data["consecutive_failures"] == 0

    def test_failures_accumulate(self, tmp_path: Path) -> None:
        """Each failed cycle increments the failure counter."""
        path = tmp_path / "health.json"
        writer = HealthWriter(path)

        writer.record_cycle("ok", True)
        success_ts = json.loads(path.read_text())["last_success_ts"]
        writer.record_cycle("transport_failure", False)
        writer.record_cycle("parse_failure", False)

        data = json.loads(path.read_text())
        assert data["last_outcome"] == "parse_failure"
        assert data["consecutive_failures"] == 2
        assert data["last_success_ts"] == success_ts
        assert writer.consecutive_failures == 2

    def test_success_resets_failures(self, tmp_path: Path) -> None:
        """A success after failures resets the counter."""
        writer = HealthWriter(tmp_path / "health.json")
        writer.record_cycle("schema_failure", False)
        writer.record_cycle("ok", True)
        assert writer.consecutive_failures == 0

    def test_no_success_yet(self, tmp_path: Path) -> None:
        """last_success_ts is null until the first ok cycle."""
        path = tmp_path / "health.json"
        HealthWriter(path).record_cycle("transport_failure", False)
        assert json.loads(path.read_text())["last_success_ts"] is None


class TestWriteFailure:
    """Write errors never escape."""

    def test_unwritable_path_logged(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A missing directory is logged at WARNING, not raised."""
        writer = HealthWriter(tmp_path / "missing" / "health.json")

        with caplog.at_level(logging.WARNING, logger="neurio.src.health"):
            writer.record_cycle("ok", True)

        assert "failed to write health file" in caplog.text
        assert writer.consecutive_failures == 0
