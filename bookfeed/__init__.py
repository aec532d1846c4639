"""Build and check the discovery feed for books, pagebooks and articles."""

__version__ = "0.1.0"
