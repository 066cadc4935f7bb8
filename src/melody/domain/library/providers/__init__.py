"""Remote fetch providers."""
