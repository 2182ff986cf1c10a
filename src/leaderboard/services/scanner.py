"""Collection scanner that groups score records by normalized wallet identity."""

from __future__ import annotations

import logging
from typing import Dict, List

from leaderboard.services.models import ScoreRecord
from leaderboard.store.errors import MalformedRecordError
from leaderboard.store.score_store import ScoreStore

LOGGER = logging.getLogger(__name__)


class CollectionScanner:
    """Read the whole score collection and bucket records by identity."""

    def __init__(self, store: ScoreStore) -> None:
        self._store = store
        self.records_read = 0
        self.malformed_keys: List[str] = []
        self.displaced_keys: List[str] = []

    def scan(self) -> Dict[str, List[ScoreRecord]]:
        """Return records grouped by normalized identity, in enumeration order.

        ``ReadError`` from the store propagates untouched; the mapping is only
        built once the full listing is in memory.
        """

        documents = self._store.enumerate()

        grouped: Dict[str, List[ScoreRecord]] = {}
        malformed: List[str] = []
        for key, data in documents:
            try:
                record = ScoreRecord.from_document(key, data)
            except MalformedRecordError as exc:
                LOGGER.warning("Skipping malformed score record: %s", exc)
                malformed.append(key)
                continue
            grouped.setdefault(record.identity, []).append(record)

        displaced: List[str] = []
        for identity, records in grouped.items():
            for record in records:
                if record.identity_key != identity and record.identity_key in grouped:
                    LOGGER.warning(
                        "Key=%s is the canonical key of identity=%s but holds a record for identity=%s",
                        record.identity_key,
                        record.identity_key,
                        identity,
                    )
                    displaced.append(record.identity_key)

        self.records_read = len(documents)
        self.malformed_keys = malformed
        self.displaced_keys = displaced
        LOGGER.info(
            "Scanned %s record(s) into %s identity group(s); %s malformed",
            len(documents),
            len(grouped),
            len(malformed),
        )
        return grouped


__all__ = ["CollectionScanner"]
