"""leaderboard: maintenance jobs for the arcade score leaderboard.

This package holds the reconciliation job that merges score records whose
wallet-address keys differ only by letter casing, together with the settings,
storage and observability helpers it runs on.
"""
