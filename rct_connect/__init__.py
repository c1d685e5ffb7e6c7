"""RCT Connect: running club social network backend."""

__version__ = "1.0.0"
