"""Merge score records whose wallet keys differ only by letter casing."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Sequence, Set

from leaderboard.observability import Observability, get_observability
from leaderboard.services.identity import display_name_for
from leaderboard.services.models import (
    DISPLAY_NAME_FIELD,
    IP_ADDRESS_FIELD,
    MERGED_AT_FIELD,
    MERGED_FROM_FIELD,
    SCORE_FIELD,
    TIMESTAMP_FIELD,
    WALLET_ADDRESS_FIELD,
    ConsolidationGroup,
    GroupFailure,
    ReconcileSummary,
    ScoreRecord,
)
from leaderboard.services.scanner import CollectionScanner
from leaderboard.store.errors import DeleteError, WriteError
from leaderboard.store.score_store import ScoreStore

LOGGER = logging.getLogger(__name__)


def select_survivor(records: Sequence[ScoreRecord]) -> ScoreRecord:
    """Return the record with the strictly greatest score.

    Ties keep the first record in scan order.
    """

    if not records:
        raise ValueError("select_survivor requires at least one record")
    best = records[0]
    for record in records[1:]:
        if record.score > best.score:
            best = record
    return best


def build_canonical_record(group: ConsolidationGroup, survivor: ScoreRecord, *, now: Any) -> Dict[str, Any]:
    """Build the full document written under the group's normalized key.

    Args:
        group: Duplicate group being consolidated.
        survivor: Record selected by :func:`select_survivor`.
        now: Store-specific value for the current time.

    Returns:
        Document payload with every absent optional field omitted.
    """

    data = {
        WALLET_ADDRESS_FIELD: group.identity,
        SCORE_FIELD: survivor.score,
        TIMESTAMP_FIELD: survivor.timestamp if survivor.timestamp is not None else now,
        DISPLAY_NAME_FIELD: display_name_for(group.identity),
        IP_ADDRESS_FIELD: survivor.ip_address or None,
        MERGED_FROM_FIELD: group.keys,
        MERGED_AT_FIELD: now,
    }
    return {key: value for key, value in data.items() if value is not None}


def _written_identities(groups: Sequence[ConsolidationGroup]) -> Set[str]:
    """Return the identities whose canonical key will be written this run.

    Every duplicate group is written. A single record stored under the key of a
    written identity is written too, under its own identity, since its current
    key is about to be overwritten.
    """

    written = {group.identity for group in groups if group.is_duplicate}
    changed = True
    while changed:
        changed = False
        for group in groups:
            if group.identity not in written and _displaced_keys(group, written):
                written.add(group.identity)
                changed = True
    return written


def _displaced_keys(group: ConsolidationGroup, written: Set[str]) -> List[str]:
    return [key for key in group.keys if key != group.identity and key in written]


class Reconciler:
    """Consolidate duplicate groups one at a time, writing before deleting."""

    def __init__(
        self,
        store: ScoreStore,
        *,
        dry_run: bool = False,
        observability: Observability | None = None,
    ) -> None:
        self._store = store
        self._dry_run = dry_run
        self._obs = observability or get_observability(component="reconciler")

    def reconcile(self, mapping: Mapping[str, List[ScoreRecord]]) -> ReconcileSummary:
        """Process every identity group and return the run summary."""

        summary = ReconcileSummary(identities_seen=len(mapping), dry_run=self._dry_run)
        groups = [ConsolidationGroup(identity=identity, records=list(records)) for identity, records in mapping.items()]
        written = _written_identities(groups)

        # Groups parked under another identity's key go first so their data is
        # copied out before that key is overwritten.
        pending = [group for group in groups if group.identity in written]
        pending.sort(key=lambda group: not _displaced_keys(group, written))

        for group in pending:
            if group.is_duplicate:
                summary.duplicate_groups += 1
            self._reconcile_group(group, summary, protected=written)
        return summary

    def _reconcile_group(
        self,
        group: ConsolidationGroup,
        summary: ReconcileSummary,
        *,
        protected: Set[str],
    ) -> None:
        survivor = select_survivor(group.records)
        displaced = _displaced_keys(group, protected)
        retired_keys = [key for key in group.keys if key != group.identity and key not in protected]
        LOGGER.info(
            "%s identity=%s entries=%s keeping score=%s from key=%s",
            "Duplicate" if group.is_duplicate else "Relocating",
            group.identity,
            len(group.records),
            survivor.score,
            survivor.identity_key,
        )
        for record in group.records:
            LOGGER.debug("  %s: score %s", record.identity_key, record.score)
        for key in displaced:
            LOGGER.info(
                "Keeping key=%s for the identity it names; identity=%s is written under its own key",
                key,
                group.identity,
            )

        if self._dry_run:
            LOGGER.info("Dry run enabled; would write key=%s and delete %s", group.identity, retired_keys)
            return

        payload = build_canonical_record(group, survivor, now=self._store.server_timestamp())
        try:
            self._store.put(group.identity, payload)
        except WriteError as exc:
            self._record_failure(summary, group, "write", exc)
            return

        for key in retired_keys:
            try:
                self._store.delete(key)
            except DeleteError as exc:
                self._record_failure(summary, group, "delete", exc)
                return
            summary.records_retired += 1
            LOGGER.info("Deleted duplicate key=%s", key)

        if group.is_duplicate:
            summary.merges_performed += 1
            self._obs.increment("reconcile.merges")
        else:
            summary.relocations_performed += 1
            self._obs.increment("reconcile.relocations")
        self._obs.emit_event(
            "reconcile.group_merged",
            identity=group.identity,
            survivor_key=survivor.identity_key,
            score=survivor.score,
            merged_from=group.keys,
            retired=retired_keys,
            displaced=displaced,
        )

    def _record_failure(
        self,
        summary: ReconcileSummary,
        group: ConsolidationGroup,
        stage: str,
        exc: Exception,
    ) -> None:
        key = getattr(exc, "key", None)
        LOGGER.error("Failed to %s identity=%s key=%s: %s", stage, group.identity, key, exc)
        summary.failures.append(GroupFailure(identity=group.identity, stage=stage, message=str(exc), key=key))
        self._obs.increment("reconcile.failures", tags={"stage": stage})
        self._obs.emit_event("reconcile.group_failed", identity=group.identity, stage=stage, key=key)


def run_reconciliation(
    store: ScoreStore,
    *,
    dry_run: bool = False,
    observability: Observability | None = None,
) -> ReconcileSummary:
    """Scan the collection, reconcile duplicate groups, and return the summary.

    Raises:
        ReadError: If the collection could not be enumerated. No writes happen in that case.
    """

    obs = observability or get_observability(component="reconciler")
    obs.emit_event("reconcile.started", dry_run=dry_run)

    scanner = CollectionScanner(store)
    mapping = scanner.scan()

    summary = Reconciler(store, dry_run=dry_run, observability=obs).reconcile(mapping)
    summary.records_scanned = scanner.records_read
    summary.malformed_records = len(scanner.malformed_keys)
    summary.displaced_records = len(scanner.displaced_keys)

    obs.increment("reconcile.duplicate_groups", value=summary.duplicate_groups)
    obs.emit_event("reconcile.completed", **summary.as_dict())
    return summary


__all__ = ["Reconciler", "build_canonical_record", "run_reconciliation", "select_survivor"]
