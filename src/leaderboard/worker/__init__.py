"""Batch workers for leaderboard maintenance."""
