"""Fetch ORCID work details from the public API v3.0 and store them as JSON."""

__version__ = "0.1.0"
__all__ = ["__version__"]