"""Tests for structured event logging and metrics wiring."""

from __future__ import annotations

import json
import logging

from leaderboard.observability import Observability, get_observability, reset_observability_cache
from leaderboard.settings import Settings


class _RecordingBackend:
    def __init__(self) -> None:
        self.calls = []

    def increment(self, metric, *, value, tags):
        self.calls.append((metric, value, tags))


def test_emit_event_writes_json_payload(caplog):
    obs = Observability(settings=Settings(), component="reconciler")

    with caplog.at_level(logging.INFO, logger="leaderboard.observability"):
        obs.emit_event("reconcile.group_merged", identity="0xab", merged_from=("0xAB", "0xab"))

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["event"] == "reconcile.group_merged"
    assert payload["component"] == "reconciler"
    assert payload["merged_from"] == ["0xAB", "0xab"]


def test_increment_normalizes_tags():
    backend = _RecordingBackend()
    obs = Observability(settings=Settings(), metrics_backend=backend)

    obs.increment("reconcile.failures", tags={"stage": "write", "skipped": None})

    assert backend.calls == [("reconcile.failures", 1.0, {"stage": "write"})]


def test_get_observability_without_statsd_has_no_backend(monkeypatch):
    monkeypatch.delenv("OBS_STATSD_HOST", raising=False)
    monkeypatch.delenv("LEADERBOARD_OBSERVABILITY__STATSD_HOST", raising=False)
    reset_observability_cache()

    obs = get_observability(component="job", settings=Settings())
    obs.increment("reconcile.merges")

    assert obs._metrics is None
    assert obs.component == "job"
