#!/usr/bin/env python3
"""Merge duplicate wallet addresses in the leaderboard score collection.

Thin wrapper around :mod:`leaderboard.cli.cleanup_duplicates`; see ``--help``.
"""

from __future__ import annotations

import sys

from leaderboard.cli.cleanup_duplicates import main

if __name__ == "__main__":
    sys.exit(main())
