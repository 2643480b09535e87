"""Database layer for ledgerclass application."""

from ledgerclass.database.base import Database
from ledgerclass.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
