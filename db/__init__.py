"""
db/ - Database Access Layer
===========================
Owns one physical connection per Connection object, runs parameterized
statements and resolves dialect differences (notably the last inserted id)
for PostgreSQL, MySQL/MariaDB, SQLite, SQL Server and Oracle.
Higher layers receive a Connection explicitly; nothing here is global.
"""

from db.connection import Connection
from db.cursor import Cursor
from db.dialects import Dialect
from db.errors import (
    DatabaseConnectionError,
    DatabaseError,
    ExecutionError,
    InvalidCursorStateError,
    InvalidStatementError,
    NotConnectedError,
    ResolutionError,
    TransactionError,
    UnsupportedDialectError,
)
from db.records import Record, Recordset

__all__ = [
    "Connection",
    "Cursor",
    "Dialect",
    "Record",
    "Recordset",
    "DatabaseError",
    "DatabaseConnectionError",
    "ExecutionError",
    "InvalidCursorStateError",
    "InvalidStatementError",
    "NotConnectedError",
    "ResolutionError",
    "TransactionError",
    "UnsupportedDialectError",
]
