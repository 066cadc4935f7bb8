"""Cross-cutting utilities with no domain dependencies."""
