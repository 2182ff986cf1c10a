"""Job entrypoints executed by the scheduler or by operators."""
