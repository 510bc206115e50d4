"""Ona UI backend: component catalog, licensing, payments and asset storage."""

__version__ = "1.0.0"
