"""Milestone registry: one tracked milestone per principal."""

__version__ = "0.1.0"
