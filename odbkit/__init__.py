"""Readers for ODB++ job data: layer features, stroke fonts, notes and structured text."""

__version__ = "0.1.0"