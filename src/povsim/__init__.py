"""Slide-based narrative engine with a toy personal-finance ledger."""

__version__ = "0.1.0"
