"""Version information for kdbg."""

__version__ = "0.2.0"
