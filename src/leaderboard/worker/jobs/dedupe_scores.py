"""Job entrypoint that merges case-variant duplicate score records."""

from __future__ import annotations

import logging
import sys

from leaderboard.services.factories import build_score_store
from leaderboard.services.models import ReconcileSummary
from leaderboard.services.reconciler import run_reconciliation
from leaderboard.settings import get_settings
from leaderboard.store.errors import ReadError
from leaderboard.store.score_store import ScoreStore

LOGGER = logging.getLogger("leaderboard.worker.jobs.dedupe_scores")


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s")


def run(store: ScoreStore, *, dry_run: bool = False) -> ReconcileSummary | None:
    """Run one reconciliation pass and log the report.

    Returns:
        The run summary, or ``None`` when the collection could not be scanned.
    """

    LOGGER.info("Scanning for duplicate wallet addresses (dry_run=%s)", dry_run)
    try:
        summary = run_reconciliation(store, dry_run=dry_run)
    except ReadError:
        LOGGER.exception("Duplicate cleanup aborted; score collection could not be read")
        return None

    LOGGER.info("\n%s", summary.format_report())
    if summary.failures:
        LOGGER.warning(
            "%s duplicate group(s) were not merged; re-running the job is safe",
            len(summary.failures),
        )
    return summary


def main() -> int:
    """Entry point executed by the scheduled job container."""

    settings = get_settings()
    _configure_logging(settings.log_level)

    try:
        store = build_score_store(settings=settings)
    except RuntimeError:
        LOGGER.exception("Unable to build score store")
        return 1

    summary = run(store, dry_run=settings.reconcile.dry_run)
    return 0 if summary is not None else 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
