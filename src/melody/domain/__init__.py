"""Domain layer for Melody."""
