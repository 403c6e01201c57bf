"""Employee task dashboard: client-side cache and refresh engine."""

__version__ = "0.1.0"
