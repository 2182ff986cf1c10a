"""Tests for the score collection scanner and identity helpers."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from leaderboard.services.identity import display_name_for, normalize_identity
from leaderboard.services.models import ScoreRecord
from leaderboard.services.scanner import CollectionScanner
from leaderboard.store.errors import MalformedRecordError, ReadError


def test_scan_groups_case_variants_in_read_order():
    store = Mock()
    store.enumerate.return_value = [
        ("0xA8F4", {"walletAddress": "0xA8F4", "score": 50}),
        ("other", {"walletAddress": "0xBB", "score": 1}),
        ("0xa8f4", {"walletAddress": "0xa8f4", "score": 120}),
        ("0xbb", {"score": 5}),
    ]

    grouped = CollectionScanner(store).scan()

    assert list(grouped) == ["0xa8f4", "0xbb"]
    assert [r.identity_key for r in grouped["0xa8f4"]] == ["0xA8F4", "0xa8f4"]
    assert [r.identity_key for r in grouped["0xbb"]] == ["other", "0xbb"]
    store.enumerate.assert_called_once_with()


def test_scan_skips_records_without_identity(caplog):
    store = Mock()
    store.enumerate.return_value = [("   ", {"walletAddress": None}), ("0x01", {"score": 2})]
    scanner = CollectionScanner(store)

    with caplog.at_level("WARNING"):
        grouped = scanner.scan()

    assert list(grouped) == ["0x01"]
    assert scanner.records_read == 2
    assert scanner.malformed_keys == ["   "]
    assert "malformed" in caplog.text


def test_scan_propagates_read_errors():
    store = Mock()
    store.enumerate.side_effect = ReadError("boom")

    with pytest.raises(ReadError):
        CollectionScanner(store).scan()


def test_score_record_defaults_and_coercion():
    record = ScoreRecord.from_document("0xAB", {"score": "lots", "mergedFrom": ["x"]})

    assert record.identity == "0xab"
    assert record.wallet_address is None
    assert record.score == 0
    assert record.merged_from == ["x"]

    with pytest.raises(MalformedRecordError) as exc_info:
        ScoreRecord.from_document("", {"walletAddress": 42})
    assert exc_info.value.key == ""


def test_normalize_identity_prefers_wallet_address():
    assert normalize_identity("0xAbC", "ignored") == "0xabc"
    assert normalize_identity("", "0xDEF") == "0xdef"
    assert normalize_identity(None, None) is None


def test_display_name_truncates_hex_addresses_only():
    assert display_name_for("0x1234567890abcdef") == "0x1234...cdef"
    assert display_name_for("guest-player") == "guest-player"
    assert display_name_for("0xa8f4") == "0xa8f4"
    assert display_name_for("0xguest-player-name") == "0xguest-player-name"


def test_scan_warns_about_keys_holding_another_identity(caplog):
    store = Mock()
    store.enumerate.return_value = [
        ("0xABC", {"walletAddress": "0xABC", "score": 5}),
        ("0xabc", {"walletAddress": "0xDEF", "score": 1}),
        ("0xdef", {"walletAddress": "0xdef", "score": 2}),
    ]
    scanner = CollectionScanner(store)

    with caplog.at_level("WARNING"):
        grouped = scanner.scan()

    assert [r.identity_key for r in grouped["0xdef"]] == ["0xabc", "0xdef"]
    assert scanner.displaced_keys == ["0xabc"]
    assert "canonical key of identity=0xabc" in caplog.text
