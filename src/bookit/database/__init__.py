"""Database layer for bookit application."""

from bookit.database.base import Database
from bookit.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
