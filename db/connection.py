"""
db/connection.py
----------------
A Connection owns exactly one physical database handle.

It resolves its source to a DB-API driver, keeps the handle in auto-commit
mode outside explicit transactions, executes parameterized statements and
hands back either a fully materialized Recordset or a streaming Cursor.

A Connection is not thread-safe; share it between threads only behind
external locking. Closing it while a Cursor is still open is a caller error.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from db.cursor import Cursor
from db.dialects import Dialect
from db.drivers import DriverSpec, redact, resolve_source
from db.errors import (
    DatabaseConnectionError,
    ExecutionError,
    InvalidStatementError,
    NotConnectedError,
    TransactionError,
)
from db.params import adapt_placeholders
from db.records import Record, Recordset, Value, column_names
from db.release import release_quietly
from utils.logger import get_logger

logger = get_logger(__name__)


class Connection:
    """Dialect-agnostic access to one database session."""

    def __init__(self, source: str = "default"):
        """
        Args:
            source: Name of a configured source, or a DSN such as
                ``postgresql://user:pw@host/db`` or ``sqlite:///app.db``.
        """
        self.source = source
        self.product_name: Optional[str] = None
        self.dialect: Optional[Dialect] = None
        self.in_transaction = False
        self._handle = None
        self._driver = None
        self._spec: Optional[DriverSpec] = None

    def __repr__(self) -> str:
        state = "open" if self._handle is not None else "closed"
        return f"<Connection {redact(self.source)!r} {state}>"

    # ── LIFECYCLE ─────────────────────────────────────────

    def open(self) -> None:
        """
        Acquire the physical handle and cache the server's product and dialect.
        Does nothing if the Connection is already open.

        Raises:
            ResolutionError: The source cannot be resolved.
            DatabaseConnectionError: The driver is missing, refuses the
                connection, or cannot be probed.
        """
        if self._handle is not None:
            return
        resolved = resolve_source(self.source)
        spec = resolved.driver
        driver = spec.load()
        try:
            handle = spec.connect(driver, resolved.url)
        except Exception as e:
            logger.error(f"Failed to connect to '{redact(self.source)}': {e}")
            raise DatabaseConnectionError(f"Cannot connect to '{redact(self.source)}': {e}") from e

        try:
            spec.set_autocommit(handle, True)
            product = spec.probe_product(driver, handle)
        except Exception as e:
            release_quietly(handle)
            logger.error(f"Failed to probe '{redact(self.source)}': {e}")
            raise DatabaseConnectionError(f"Cannot probe '{redact(self.source)}': {e}") from e

        self._handle = handle
        self._driver = driver
        self._spec = spec
        self.product_name = product
        self.dialect = Dialect.detect(product)
        self.in_transaction = False
        logger.info(f"Connected to '{redact(self.source)}' ({product})")

    def close(self) -> None:
        """Release the handle. Safe to call repeatedly; never raises."""
        if self._handle is None:
            return
        if self.in_transaction:
            logger.warning(f"Closing '{redact(self.source)}' with an open transaction; pending work is lost")
        handle, self._handle = self._handle, None
        release_quietly(handle)
        self._driver = None
        self._spec = None
        self.product_name = None
        self.dialect = None
        self.in_transaction = False
        logger.info(f"Connection to '{redact(self.source)}' closed.")

    def connected(self) -> bool:
        """True iff a handle is held and the driver reports it open. Never raises."""
        if self._handle is None:
            return False
        try:
            return bool(self._spec.is_open(self._handle))
        except Exception:
            return False

    def _require_open(self) -> None:
        if not self.connected():
            raise NotConnectedError(f"Connection to '{redact(self.source)}' is not open")

    # ── TRANSACTIONS ──────────────────────────────────────

    def begin(self) -> None:
        """
        Leave auto-commit mode until the next commit() or rollback().
        Transactions do not nest; calling begin() twice is a caller error.
        """
        self._require_open()
        try:
            self._spec.set_autocommit(self._handle, False)
        except self._driver.Error as e:
            logger.error(f"Failed to begin transaction: {e}")
            raise TransactionError(f"Cannot begin transaction: {e}") from e
        self.in_transaction = True

    def commit(self) -> None:
        """Commit pending work and restore auto-commit mode."""
        self._end_transaction("commit")

    def rollback(self) -> None:
        """Discard pending work and restore auto-commit mode."""
        self._end_transaction("rollback")

    def _end_transaction(self, action: str) -> None:
        self._require_open()
        try:
            getattr(self._handle, action)()
            self._spec.set_autocommit(self._handle, True)
        except self._driver.Error as e:
            logger.error(f"Transaction {action} failed: {e}")
            raise TransactionError(f"Transaction {action} failed: {e}") from e
        self.in_transaction = False

    @contextmanager
    def transaction(self) -> Iterator["Connection"]:
        """
        Run a block inside begin()/commit(), rolling back if it raises.

        Usage:
            with conn.transaction():
                conn.query("INSERT INTO t (name) VALUES (?)", "a")
        """
        self.begin()
        try:
            yield self
        except BaseException:
            try:
                self.rollback()
            except TransactionError as e:
                logger.error(f"Rollback after failure also failed: {e}")
            raise
        try:
            self.commit()
        except TransactionError:
            try:
                self.rollback()
            except TransactionError as e:
                logger.error(f"Rollback after failed commit also failed: {e}")
            raise

    # ── EXECUTION ─────────────────────────────────────────

    def _execute(self, sql: str, params: tuple):
        """Prepare, bind and execute; returns the executed driver cursor."""
        self._require_open()
        if not isinstance(sql, str) or not sql.strip():
            raise InvalidStatementError("Invalid SQL: statement text is empty")

        statement = adapt_placeholders(
            sql,
            self._driver.paramstyle,
            bool(params),
            backslash_escapes=self.dialect is Dialect.MYSQL,
        )
        try:
            result = self._handle.cursor()
        except self._driver.Error as e:
            raise ExecutionError(f"Cannot create statement: {e}") from e
        try:
            logger.debug(f"Executing: {statement.strip()} | params={len(params)}")
            if params:
                result.execute(statement, params)
            else:
                result.execute(statement)
        except self._driver.Error as e:
            release_quietly(result)
            logger.error(f"Statement failed: {e}")
            raise ExecutionError(f"Statement failed: {e}") from e
        except Exception:
            release_quietly(result)
            raise
        return result

    def query(self, sql: str, *params: Value) -> int:
        """
        Execute an INSERT, UPDATE, DELETE or DDL statement.

        Args:
            sql: Statement with ``?`` positional placeholders.
            params: Values bound to the placeholders, in order.

        Returns:
            Number of rows affected (0 when the driver does not report one).

        Raises:
            NotConnectedError: The Connection is closed.
            InvalidStatementError: ``sql`` is None or blank.
            ExecutionError: The driver rejected the statement or its parameters.
        """
        result = self._execute(sql, params)
        try:
            return max(result.rowcount, 0)
        finally:
            release_quietly(result)

    def select(self, sql: str, *params: Value) -> Recordset:
        """
        Execute a query and materialize every row.

        Returns:
            A Recordset in result order; each Record keyed by column name.

        Raises:
            Same as query().
        """
        result = self._execute(sql, params)
        try:
            columns = column_names(result.description)
            rows = result.fetchall()
        except self._driver.Error as e:
            logger.error(f"Failed to read result: {e}")
            raise ExecutionError(f"Failed to read result: {e}") from e
        finally:
            release_quietly(result)
        return Recordset(Record.from_row(columns, row) for row in rows)

    def cursor(self, sql: str, *params: Value) -> Cursor:
        """
        Execute a query and stream its rows through a Cursor.
        The caller must close the Cursor.

        Raises:
            Same as query().
        """
        return Cursor(self._execute(sql, params), self._driver.Error)

    def scalar(self, sql: str, *params: Value) -> Value:
        """First column of the first row, or None when no row comes back."""
        result = self._execute(sql, params)
        try:
            row = result.fetchone()
        except self._driver.Error as e:
            raise ExecutionError(f"Failed to read result: {e}") from e
        finally:
            release_quietly(result)
        return row[0] if row else None

    # ── DIALECT-SPECIFIC ──────────────────────────────────

    def last_insert_id(self, sequence: Optional[str] = None) -> int:
        """
        Identifier generated by the most recent insert on this session.

        Must be called right after the insert, on the same Connection and
        before any other statement, or the value may be stale or unrelated.

        Args:
            sequence: Oracle only; see Dialect.last_insert_id_sql().

        Returns:
            The identifier, or 0 if the server reports none.

        Raises:
            NotConnectedError: The Connection is closed.
            UnsupportedDialectError: The connected product is not recognized.
        """
        self._require_open()
        dialect = self.dialect or Dialect.from_product_name(self.product_name or "unknown")
        if dialect is Dialect.ORACLE and sequence is None:
            logger.warning("last_insert_id on Oracle without a sequence name; querying SEQ.CURRVAL")
        value = self.scalar(dialect.last_insert_id_sql(sequence))
        return int(value) if value is not None else 0

    # ── CONTEXT MANAGER ───────────────────────────────────

    def __enter__(self) -> "Connection":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
