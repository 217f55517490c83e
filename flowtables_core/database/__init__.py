"""
Database Module

SQLAlchemy models, repositories and the database manager.
"""

from .base import Base, DatabaseManager, TimestampMixin, generate_id
from .models import Cell, Field, Flag, Record, Table, TableWebhook

__all__ = [
    "Base",
    "DatabaseManager",
    "TimestampMixin",
    "generate_id",
    "Cell",
    "Field",
    "Flag",
    "Record",
    "Table",
    "TableWebhook",
]
