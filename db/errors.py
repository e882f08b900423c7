"""
db/errors.py
------------
Exception hierarchy for the database access layer.
Driver exceptions never leak to callers; they are chained as ``__cause__``.
"""


class DatabaseError(Exception):
    """Base class for every error raised by the db package."""


class ResolutionError(DatabaseError):
    """The source identifier does not name a configured source or known DSN scheme."""


class DatabaseConnectionError(DatabaseError):
    """The physical handle could not be established or probed."""


class NotConnectedError(DatabaseError):
    """An operation needing an open handle was called on a closed Connection."""


class InvalidStatementError(DatabaseError):
    """SQL text is missing or blank."""


class ExecutionError(DatabaseError):
    """The driver rejected a prepared, bound or executed statement."""


class TransactionError(DatabaseError):
    """Commit or rollback failed."""


class UnsupportedDialectError(DatabaseError):
    """No last-insert-id statement is known for the connected product."""

    def __init__(self, product: str):
        self.product = product
        super().__init__(f"Unsupported database: {product}")


class InvalidCursorStateError(DatabaseError):
    """A Cursor row was read before next(), after exhaustion, or after close()."""
