"""Business relationship discovery and mapping."""

__version__ = "0.1.0"
