"""Melody - a single-playlist music player for the terminal."""

__version__ = "0.1.0"
