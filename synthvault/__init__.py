"""Overcollateralized synthetic-asset accounting engine."""

__version__ = "0.1.0"
