"""Domain repositories backed by SQLite."""
