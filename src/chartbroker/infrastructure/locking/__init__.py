"""Per-instance locking."""
