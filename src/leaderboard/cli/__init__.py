"""Command-line tools for leaderboard operators."""
