"""Unified async query engine over booru-style image catalogs."""

__version__ = "0.1.0"
