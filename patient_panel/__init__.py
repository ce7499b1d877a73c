"""Patient tracking panel backed by a Google Sheets tab."""

__version__ = "0.1.0"
