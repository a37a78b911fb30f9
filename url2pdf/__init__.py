"""URL to PDF rendering service."""

__version__ = "1.0.0"
