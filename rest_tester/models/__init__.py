"""
Models package for REST Tester.

Exports all SQLAlchemy models for database operations.
"""

from .history import History

__all__ = [
    "History",
]
