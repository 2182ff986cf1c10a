"""Service layer for leaderboard maintenance jobs."""
