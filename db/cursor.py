"""
db/cursor.py
------------
Forward-only streaming access to a live result.

A Cursor owns the driver cursor that executed its statement. Rows are fetched
one at a time, so large results are never held in memory. The caller owns the
Cursor and must close it, also on error paths (``with`` does this).
"""

from typing import Iterator

from db.errors import ExecutionError, InvalidCursorStateError
from db.records import Record, Value, column_names
from db.release import release_quietly


class Cursor:
    """Single-pass iterator over the rows of an executed statement."""

    def __init__(self, result, driver_error: type = Exception):
        """
        Args:
            result: An executed DB-API cursor; ownership passes to this Cursor.
            driver_error: The driver's ``Error`` class, wrapped as ExecutionError.
        """
        self._result = result
        self._driver_error = driver_error
        self._row = None
        self._exhausted = False

    @property
    def closed(self) -> bool:
        return self._result is None

    def next(self) -> bool:
        """
        Advance to the next row.

        Returns:
            True if a row is now current, False once the result is exhausted.

        Raises:
            InvalidCursorStateError: If the Cursor was closed.
            ExecutionError: If the driver fails while fetching.
        """
        if self._result is None:
            raise InvalidCursorStateError("Cursor is closed")
        if self._exhausted:
            return False
        try:
            row = self._result.fetchone()
        except self._driver_error as e:
            raise ExecutionError(f"Failed to fetch row: {e}") from e
        if row is None:
            self._row = None
            self._exhausted = True
            return False
        self._row = row
        return True

    def get(self, column: str) -> Value:
        """
        Value of ``column`` in the current row.

        Raises:
            InvalidCursorStateError: No current row.
            KeyError: The result has no such column.
        """
        return self.get_row()[column]

    def get_row(self) -> Record:
        """The current row as a Record, keyed by the live result's column names."""
        if self._result is None:
            raise InvalidCursorStateError("Cursor is closed")
        if self._row is None:
            state = "exhausted" if self._exhausted else "not positioned; call next() first"
            raise InvalidCursorStateError(f"No current row: cursor is {state}")
        return Record.from_row(column_names(self._result.description), self._row)

    def close(self) -> None:
        """Release the driver cursor. Safe to call more than once; never raises."""
        result, self._result = self._result, None
        self._row = None
        release_quietly(result)

    def __iter__(self) -> Iterator[Record]:
        while self.next():
            yield self.get_row()

    def __enter__(self) -> "Cursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
