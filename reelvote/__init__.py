"""Reel Vote: live-event audience and judge voting."""

__version__ = "1.0.0"
