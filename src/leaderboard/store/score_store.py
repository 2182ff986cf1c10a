"""Score collection stores used by the reconciliation job."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from google.cloud import firestore

from leaderboard.store.errors import DeleteError, ReadError, WriteError

LOGGER = logging.getLogger(__name__)


class ScoreStore:
    """Key-value contract the reconciliation job needs from a score collection.

    Implementations must give ``put`` full-overwrite semantics and make
    ``delete`` a no-op for keys that do not exist.
    """

    def enumerate(self) -> List[Tuple[str, Dict[str, Any]]]:  # pragma: no cover - interface only
        """Return every ``(key, record)`` pair in the collection.

        Raises:
            ReadError: If the collection cannot be read in full.
        """

        raise NotImplementedError

    def put(self, key: str, record: Dict[str, Any]) -> None:  # pragma: no cover - interface only
        """Replace the record stored at ``key``.

        Raises:
            WriteError: If the write is rejected.
        """

        raise NotImplementedError

    def delete(self, key: str) -> None:  # pragma: no cover - interface only
        """Remove the record stored at ``key``.

        Raises:
            DeleteError: If the delete is rejected.
        """

        raise NotImplementedError

    def server_timestamp(self) -> Any:
        """Return a value the store resolves to the current time on write."""

        return datetime.now(timezone.utc)


class FirestoreScoreStore(ScoreStore):
    """Score collection backed by a Firestore collection of wallet-keyed documents."""

    def __init__(
        self,
        *,
        project: str,
        collection: str,
        client: Optional[firestore.Client] = None,
    ) -> None:
        if not project:
            raise ValueError("FirestoreScoreStore requires a project ID")
        if not collection:
            raise ValueError("FirestoreScoreStore requires a collection name")

        self._client = client or firestore.Client(project=project)
        self._collection_name = collection
        self._collection = self._client.collection(collection)

    @property
    def collection_name(self) -> str:
        return self._collection_name

    def enumerate(self) -> List[Tuple[str, Dict[str, Any]]]:
        try:
            # Materialise the stream so a mid-read failure never yields a partial listing.
            return [(snapshot.id, snapshot.to_dict() or {}) for snapshot in self._collection.stream()]
        except Exception as exc:
            LOGGER.exception("Firestore read failed for collection=%s", self._collection_name)
            raise ReadError(f"Firestore read failed for collection={self._collection_name}: {exc}") from exc

    def put(self, key: str, record: Dict[str, Any]) -> None:
        try:
            self._collection.document(key).set(record)
        except Exception as exc:
            LOGGER.exception("Firestore write failed for key=%s", key)
            raise WriteError(f"Firestore write failed for key={key}: {exc}", key=key) from exc

    def delete(self, key: str) -> None:
        try:
            self._collection.document(key).delete()
        except Exception as exc:
            LOGGER.exception("Firestore delete failed for key=%s", key)
            raise DeleteError(f"Firestore delete failed for key={key}: {exc}", key=key) from exc

    def server_timestamp(self) -> Any:
        return firestore.SERVER_TIMESTAMP


__all__ = ["ScoreStore", "FirestoreScoreStore"]
