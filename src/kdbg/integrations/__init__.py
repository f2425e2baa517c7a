"""External tool integrations for kdbg."""
