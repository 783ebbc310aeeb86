"""
Database package for Mystira.

This package provides SQLite-based persistence for scenarios and game sessions.
"""

from .manager import DatabaseManager

__all__ = ["DatabaseManager"]
