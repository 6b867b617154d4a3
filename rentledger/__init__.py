"""Rental billing and outstanding-balance reconciliation."""

__version__ = "0.1.0"
