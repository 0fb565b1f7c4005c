"""Trade Journal - analytics core and CLI for a personal trading journal."""

__version__ = "0.1.0"
