"""Status bar core: config parsing, dynamic values, ironvars, desktop files, clock and IPC."""

__version__ = "0.1.0"

__all__ = ["__version__"]