"""Infra layer utilities (result persistence)."""

from .storage import ResultStore

__all__ = ["ResultStore"]
