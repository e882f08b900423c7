"""
db/dialects.py
--------------
SQL dialects and the follow-up statement each one uses to report the
identifier generated by the last insert. SQL has no portable syntax for it.
"""

import re
from enum import Enum
from typing import Optional

from db.errors import InvalidStatementError, UnsupportedDialectError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_$#]*(\.[A-Za-z_][A-Za-z0-9_$#]*)?$")

ORACLE_DEFAULT_SEQUENCE = "SEQ"


class Dialect(str, Enum):
    """Database products the Connection knows how to ask for a generated key."""

    MYSQL = "mysql"
    POSTGRESQL = "postgresql"
    SQLITE = "sqlite"
    SQLSERVER = "sqlserver"
    ORACLE = "oracle"

    @classmethod
    def detect(cls, product_name: str) -> Optional["Dialect"]:
        """
        Match a driver-reported product name (case-insensitive substring).

        Returns:
            The matching Dialect, or None for an unrecognized product.
        """
        name = (product_name or "").lower()
        for needles, dialect in _PRODUCT_MATCHERS:
            if any(needle in name for needle in needles):
                return dialect
        return None

    @classmethod
    def from_product_name(cls, product_name: str) -> "Dialect":
        """Like detect(), but raises UnsupportedDialectError naming the product."""
        dialect = cls.detect(product_name)
        if dialect is None:
            raise UnsupportedDialectError(product_name)
        return dialect

    def last_insert_id_sql(self, sequence: Optional[str] = None) -> str:
        """
        The statement returning the last generated identifier on this session.

        Args:
            sequence: Oracle only. Name of the sequence feeding the insert.
                Oracle has no session-wide "last id"; without a name the
                fixed ``SEQ`` sequence is queried, which only fits schemas
                that follow that convention.
        """
        if self is Dialect.ORACLE:
            name = sequence or ORACLE_DEFAULT_SEQUENCE
            if not _IDENTIFIER.match(name):
                raise InvalidStatementError(f"Invalid sequence name: {name!r}")
            return f"SELECT {name}.CURRVAL FROM DUAL"
        return _LAST_INSERT_ID_SQL[self]


_PRODUCT_MATCHERS = (
    (("mysql", "mariadb"), Dialect.MYSQL),
    (("postgresql",), Dialect.POSTGRESQL),
    (("sqlite",), Dialect.SQLITE),
    (("sql server",), Dialect.SQLSERVER),
    (("oracle",), Dialect.ORACLE),
)

_LAST_INSERT_ID_SQL = {
    Dialect.MYSQL: "SELECT LAST_INSERT_ID()",
    Dialect.POSTGRESQL: "SELECT LASTVAL()",
    Dialect.SQLITE: "SELECT last_insert_rowid()",
    Dialect.SQLSERVER: "SELECT @@IDENTITY",
}
