"""Guild battle castle snapshot collector."""

__version__ = "0.1.0"
