"""Realtime chat and presence gateway."""

__version__ = "1.0.0"
