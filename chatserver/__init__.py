"""Real-time multi-user chat server."""

__version__ = "1.0.0"
