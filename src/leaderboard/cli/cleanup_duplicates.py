"""Merge duplicate wallet addresses in the leaderboard score collection.

Scores end up duplicated when the same wallet is stored under differently cased
keys (``0xa8f4...`` vs ``0xA8F4...``). This command keeps the highest score for
each address under its lowercase key and deletes the other copies. It is safe to
re-run after a partial failure.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from leaderboard.services.factories import build_score_store
from leaderboard.settings import get_settings
from leaderboard.worker.jobs.dedupe_scores import run

LOGGER = logging.getLogger("leaderboard.cli.cleanup_duplicates")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Merge score records whose wallet addresses differ only by letter casing",
    )
    parser.add_argument(
        "--firestore-project",
        help="Google Cloud project holding the score collection (defaults to settings).",
    )
    parser.add_argument(
        "--collection",
        help="Score collection name (defaults to settings, usually 'scores').",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report duplicate groups without writing or deleting anything.",
    )
    parser.add_argument(
        "--report",
        help="Optional path to write a JSON summary report.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s %(levelname)s %(name)s %(message)s")

    settings = get_settings()
    try:
        store = build_score_store(settings=settings, project=args.firestore_project, collection=args.collection)
    except RuntimeError:
        LOGGER.exception("Unable to build score store")
        return 1
    LOGGER.info("Cleaning collection %s", store.collection_name)

    summary = run(store, dry_run=args.dry_run or settings.reconcile.dry_run)
    if summary is None:
        return 1

    if args.report:
        LOGGER.info("Writing report to %s", args.report)
        with open(args.report, "w", encoding="utf-8") as fh:
            json.dump(summary.as_dict(), fh, indent=2)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
