"""kdbg command line interface."""
