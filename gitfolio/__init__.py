"""Admin console and public viewer for a repository-backed static site."""

__version__ = "0.1.0"
