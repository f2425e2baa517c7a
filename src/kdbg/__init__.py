"""kdbg - Kubernetes pod debugger with fuzzy pod matching."""

from kdbg.__version__ import __version__

__all__ = ["__version__"]
