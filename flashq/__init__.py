"""Command-line client, HTTP API types, validation and errors for the FlashQ record queue."""

__version__ = "0.1.0"