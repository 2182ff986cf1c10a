"""Domain objects for the duplicate-score reconciliation job."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping

from leaderboard.services.identity import normalize_identity
from leaderboard.store.errors import MalformedRecordError

LOGGER = logging.getLogger(__name__)

FailureStage = Literal["write", "delete"]

# Firestore field names used by the score collection.
WALLET_ADDRESS_FIELD = "walletAddress"
SCORE_FIELD = "score"
TIMESTAMP_FIELD = "timestamp"
DISPLAY_NAME_FIELD = "playerName"
IP_ADDRESS_FIELD = "ipAddress"
MERGED_FROM_FIELD = "mergedFrom"
MERGED_AT_FIELD = "mergedAt"


def _coerce_score(key: str, value: Any) -> int | float:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        LOGGER.warning("Treating non-numeric score %r as 0 for key=%s", value, key)
        return 0
    return value


@dataclass(slots=True)
class ScoreRecord:
    """A player score document as read from the collection."""

    identity_key: str
    identity: str
    wallet_address: str | None
    score: int | float
    timestamp: Any = None
    display_name: str | None = None
    ip_address: str | None = None
    merged_from: List[str] = field(default_factory=list)
    merged_at: Any = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_document(cls, key: str, data: Mapping[str, Any] | None) -> "ScoreRecord":
        """Build a record from a stored document.

        Raises:
            MalformedRecordError: If neither ``walletAddress`` nor the key yields an identity.
        """

        payload = dict(data or {})
        wallet_address = payload.get(WALLET_ADDRESS_FIELD)
        identity = normalize_identity(wallet_address, key)
        if identity is None:
            raise MalformedRecordError(f"Record key={key!r} has no usable wallet identity", key=key)
        return cls(
            identity_key=key,
            identity=identity,
            wallet_address=wallet_address if isinstance(wallet_address, str) else None,
            score=_coerce_score(key, payload.get(SCORE_FIELD)),
            timestamp=payload.get(TIMESTAMP_FIELD),
            display_name=payload.get(DISPLAY_NAME_FIELD),
            ip_address=payload.get(IP_ADDRESS_FIELD),
            merged_from=list(payload.get(MERGED_FROM_FIELD) or []),
            merged_at=payload.get(MERGED_AT_FIELD),
            raw=payload,
        )


@dataclass(slots=True)
class ConsolidationGroup:
    """Records sharing one normalized identity, in scan order."""

    identity: str
    records: List[ScoreRecord]

    @property
    def is_duplicate(self) -> bool:
        return len(self.records) > 1

    @property
    def keys(self) -> List[str]:
        return [record.identity_key for record in self.records]


@dataclass(slots=True)
class GroupFailure:
    """A duplicate group the reconciler could not finish."""

    identity: str
    stage: FailureStage
    message: str
    key: str | None = None


@dataclass(slots=True)
class ReconcileSummary:
    """Counters reported at the end of a reconciliation run."""

    records_scanned: int = 0
    identities_seen: int = 0
    duplicate_groups: int = 0
    merges_performed: int = 0
    records_retired: int = 0
    relocations_performed: int = 0
    displaced_records: int = 0
    malformed_records: int = 0
    dry_run: bool = False
    failures: List[GroupFailure] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """bool: True when nothing is left to merge and no group failed."""

        if self.failures:
            return False
        if self.duplicate_groups == 0:
            return True
        return not self.dry_run and self.merges_performed == self.duplicate_groups

    def as_dict(self) -> Dict[str, Any]:
        return {
            "records_scanned": self.records_scanned,
            "identities_seen": self.identities_seen,
            "duplicate_groups": self.duplicate_groups,
            "merges_performed": self.merges_performed,
            "records_retired": self.records_retired,
            "relocations_performed": self.relocations_performed,
            "displaced_records": self.displaced_records,
            "malformed_records": self.malformed_records,
            "dry_run": self.dry_run,
            "complete": self.complete,
            "failures": [
                {"identity": item.identity, "stage": item.stage, "key": item.key, "message": item.message}
                for item in self.failures
            ],
        }

    def format_report(self) -> str:
        """Render the human-readable cleanup summary."""

        rule = "=" * 60
        lines = [
            rule,
            "Cleanup Summary" + (" (dry run)" if self.dry_run else ""),
            f"  Records scanned: {self.records_scanned}",
            f"  Total unique addresses: {self.identities_seen}",
            f"  Duplicates found: {self.duplicate_groups}",
            f"  Merges performed: {self.merges_performed}",
            f"  Records retired: {self.records_retired}",
            f"  Records relocated to their own key: {self.relocations_performed}",
            f"  Records under another address's key: {self.displaced_records}",
            f"  Malformed records skipped: {self.malformed_records}",
            f"  Failed groups: {len(self.failures)}",
        ]
        for failure in self.failures:
            lines.append(f"    - {failure.identity} ({failure.stage}): {failure.message}")
        lines.append(rule)
        if self.duplicate_groups == 0:
            lines.append("No duplicates found; collection is clean.")
        elif self.dry_run:
            lines.append("Dry run only; re-run without dry run to merge duplicates.")
        elif self.complete:
            lines.append("All duplicates merged, keeping the highest score for each address.")
        else:
            lines.append("Some duplicate groups were not merged; re-run to retry them.")
        return "\n".join(lines)


__all__ = [
    "ScoreRecord",
    "ConsolidationGroup",
    "GroupFailure",
    "ReconcileSummary",
]
