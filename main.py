"""
main.py
-------
Connectivity check for a configured database source.

Usage:
    python main.py                 # checks the "default" source
    python main.py reporting       # checks DB_SOURCE_REPORTING
    python main.py sqlite:///app.db

Opens the source, reports the server product and dialect, runs ``SELECT 1``
and exits non-zero if any step fails.
"""

import sys

from db import Connection, DatabaseError, Dialect
from utils.logger import get_logger

logger = get_logger(__name__)


def check_source(source: str) -> bool:
    """
    Open a source, run a trivial query and close it again.

    Args:
        source: Configured source name or DSN.

    Returns:
        True if the round trip succeeded.
    """
    conn = Connection(source)
    try:
        conn.open()
        dialect = conn.dialect.value if conn.dialect else "unsupported"
        logger.info(f"Server product: {conn.product_name} (dialect: {dialect})")
        probe = "SELECT 1 FROM DUAL" if conn.dialect is Dialect.ORACLE else "SELECT 1"
        ok = conn.scalar(probe) == 1
        logger.info("Database connection test: " + ("SUCCESS" if ok else "FAILED"))
        return ok
    except DatabaseError as e:
        logger.error(f"Connection test failed: {e}")
        return False
    finally:
        conn.close()


def main() -> None:
    source = sys.argv[1] if len(sys.argv) > 1 else "default"
    sys.exit(0 if check_source(source) else 1)


if __name__ == "__main__":
    main()
