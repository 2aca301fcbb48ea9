"""Deadline-bound multi-site news crawler."""

__version__ = "0.3.0"
