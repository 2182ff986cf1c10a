"""Factory helpers that instantiate leaderboard services from configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from leaderboard.settings import get_settings
from leaderboard.store.score_store import FirestoreScoreStore

if TYPE_CHECKING:  # pragma: no cover - typing only
    from leaderboard.settings import Settings


def build_score_store(
    *,
    settings: "Settings" | None = None,
    project: str | None = None,
    collection: str | None = None,
) -> FirestoreScoreStore:
    """Instantiate the Firestore score store aligned with storage settings.

    Args:
        settings: Optional settings override; defaults to :func:`get_settings`.
        project: Explicit Firestore project, taking precedence over settings.
        collection: Explicit collection name, taking precedence over settings.

    Raises:
        RuntimeError: If no Firestore project is configured.
    """

    resolved = settings or get_settings()
    project = project or resolved.storage.firestore_project
    collection = collection or resolved.storage.scores_collection

    if not project:
        raise RuntimeError(
            "Score store requires storage.firestore_project; set LEADERBOARD_STORAGE__FIRESTORE_PROJECT.",
        )

    return FirestoreScoreStore(project=project, collection=collection)


__all__ = ["build_score_store"]
