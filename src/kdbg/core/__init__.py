"""Core configuration and error types for kdbg."""
