"""
db/records.py
-------------
Row containers returned by the Connection.
A Record is one row; a Recordset is a fully materialized result.
"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union

# Cell values are passed through from the driver unchanged. Types outside
# this union (UUID, JSON, driver LOB objects) are passed through as well.
Value = Union[int, float, Decimal, str, bool, None, bytes, date, datetime, time, timedelta]


class Record(dict):
    """
    One result row: column name -> value, in result column order.

    When a result carries duplicate column names the last one wins,
    same as reading the row by name.
    """

    @classmethod
    def from_row(cls, columns: Sequence[str], values: Sequence[Value]) -> "Record":
        return cls(zip(columns, values))


class Recordset(tuple):
    """Immutable, ordered sequence of Records."""

    def __new__(cls, records: Iterable[Record] = ()):
        return super().__new__(cls, records)

    def first(self) -> Optional[Record]:
        """Returns the first Record, or None for an empty result."""
        return self[0] if self else None

    def __repr__(self) -> str:
        return f"Recordset({list(self)!r})"


def column_names(description) -> list[str]:
    """
    Extract column names from a DB-API ``cursor.description``.

    Args:
        description: Sequence of 7-item column descriptors, or None when the
            statement produced no result set.

    Returns:
        Column names in result order (empty list for no result set).
    """
    if not description:
        return []
    return [col[0] for col in description]
