"""Base domain types and ports."""
