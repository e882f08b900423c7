"""
db/drivers.py
-------------
Resolves a source identifier to a DB-API driver and a parsed DSN.

A source identifier is either a DSN (``postgresql://user:pw@host/db``) or the
name of a source configured in the environment (see ``config.DATABASE_SOURCES``).
Each DSN scheme maps to a DriverSpec that knows how to connect, how to switch
auto-commit, how to probe whether the handle is still open and which product
the server reports. Driver modules are imported lazily, so only the drivers a
deployment actually uses need to be installed.
"""

import importlib
from dataclasses import dataclass
from types import ModuleType
from typing import Any, Callable, Optional
from urllib.parse import SplitResult, parse_qsl, unquote, urlsplit

import config
from db.errors import DatabaseConnectionError, ResolutionError
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DriverSpec:
    """
    How to drive one DB-API module.

    Attributes:
        module_name: Import path of the DB-API module (e.g. ``psycopg2``).
        package: Distribution to suggest when the module is missing (None for stdlib).
        connect: ``(module, url) -> handle``.
        probe_product: ``(module, handle) -> product name`` as reported by the server.
        set_autocommit: ``(handle, enabled) -> None``.
        is_open: ``(handle) -> bool``; may raise once the handle is closed.
    """
    module_name: str
    package: Optional[str]
    connect: Callable[[ModuleType, SplitResult], Any]
    probe_product: Callable[[ModuleType, Any], str]
    set_autocommit: Callable[[Any, bool], None]
    is_open: Callable[[Any], bool]

    def load(self) -> ModuleType:
        """Import the driver module, or fail with an install hint."""
        try:
            return importlib.import_module(self.module_name)
        except ImportError as e:
            hint = f"Install with: pip install {self.package}" if self.package else "It ships with CPython."
            raise DatabaseConnectionError(
                f"{self.module_name} is required for this source. {hint}"
            ) from e


@dataclass(frozen=True)
class ResolvedSource:
    """A source identifier resolved to its DSN and driver."""
    name: str
    url: SplitResult
    driver: DriverSpec


# ── SQLite (stdlib sqlite3) ───────────────────────────────

def _sqlite_path(url: SplitResult) -> str:
    # sqlite:///rel.db -> rel.db, sqlite:////abs.db -> /abs.db, sqlite:// -> memory
    path = url.path[1:] if url.path.startswith("/") else url.path
    return unquote(path) or ":memory:"


def _sqlite_connect(module, url):
    # isolation_level=None keeps sqlite3 in auto-commit until BEGIN is issued
    return module.connect(
        _sqlite_path(url),
        timeout=config.DB_CONNECT_TIMEOUT,
        isolation_level=None,
    )


def _sqlite_set_autocommit(handle, enabled: bool) -> None:
    if not enabled:
        handle.execute("BEGIN")


def _sqlite_is_open(handle) -> bool:
    handle.total_changes  # raises ProgrammingError on a closed connection
    return True


# ── PostgreSQL (psycopg2) ─────────────────────────────────

def _postgres_connect(module, url):
    dsn = url._replace(scheme="postgresql").geturl()
    return module.connect(dsn, connect_timeout=config.DB_CONNECT_TIMEOUT)


def _set_autocommit_attr(handle, enabled: bool) -> None:
    handle.autocommit = enabled


# ── MySQL / MariaDB (pymysql) ─────────────────────────────

def _mysql_connect(module, url):
    return module.connect(
        host=url.hostname or "localhost",
        port=url.port or 3306,
        user=unquote(url.username or ""),
        password=unquote(url.password or ""),
        database=url.path.lstrip("/") or None,
        connect_timeout=config.DB_CONNECT_TIMEOUT,
        charset="utf8mb4",
    )


def _mysql_product(module, handle) -> str:
    info = handle.get_server_info()
    family = "MariaDB" if "mariadb" in info.lower() else "MySQL"
    return f"{family} {info}"


# ── SQL Server (pyodbc) ───────────────────────────────────

_DEFAULT_ODBC_DRIVER = "ODBC Driver 18 for SQL Server"


def _mssql_connect(module, url):
    options = dict(parse_qsl(url.query))
    driver = options.pop("driver", _DEFAULT_ODBC_DRIVER)
    server = url.hostname or "localhost"
    if url.port:
        server = f"{server},{url.port}"
    parts = [f"DRIVER={{{driver}}}", f"SERVER={server}"]
    if url.path.lstrip("/"):
        parts.append(f"DATABASE={url.path.lstrip('/')}")
    if url.username:
        parts.append(f"UID={unquote(url.username)}")
        parts.append(f"PWD={unquote(url.password or '')}")
    parts.extend(f"{key}={value}" for key, value in options.items())
    return module.connect(";".join(parts), timeout=config.DB_CONNECT_TIMEOUT)


# ── Oracle (oracledb) ─────────────────────────────────────

def _oracle_connect(module, url):
    return module.connect(
        user=unquote(url.username or ""),
        password=unquote(url.password or ""),
        dsn=f"{url.hostname or 'localhost'}:{url.port or 1521}/{url.path.lstrip('/')}",
        tcp_connect_timeout=config.DB_CONNECT_TIMEOUT,
    )


SQLITE = DriverSpec(
    module_name="sqlite3",
    package=None,
    connect=_sqlite_connect,
    probe_product=lambda module, handle: f"SQLite {module.sqlite_version}",
    set_autocommit=_sqlite_set_autocommit,
    is_open=_sqlite_is_open,
)

POSTGRESQL = DriverSpec(
    module_name="psycopg2",
    package="psycopg2-binary",
    connect=_postgres_connect,
    probe_product=lambda module, handle: f"PostgreSQL {handle.server_version}",
    set_autocommit=_set_autocommit_attr,
    is_open=lambda handle: handle.closed == 0,
)

MYSQL = DriverSpec(
    module_name="pymysql",
    package="pymysql",
    connect=_mysql_connect,
    probe_product=_mysql_product,
    set_autocommit=lambda handle, enabled: handle.autocommit(enabled),
    is_open=lambda handle: bool(handle.open),
)

SQLSERVER = DriverSpec(
    module_name="pyodbc",
    package="pyodbc",
    connect=_mssql_connect,
    probe_product=lambda module, handle: handle.getinfo(module.SQL_DBMS_NAME),
    set_autocommit=_set_autocommit_attr,
    is_open=lambda handle: not handle.closed,
)

ORACLE = DriverSpec(
    module_name="oracledb",
    package="oracledb",
    connect=_oracle_connect,
    probe_product=lambda module, handle: f"Oracle {handle.version}",
    set_autocommit=_set_autocommit_attr,
    is_open=lambda handle: handle.is_healthy(),
)

_drivers: dict[str, DriverSpec] = {
    "sqlite": SQLITE,
    "postgresql": POSTGRESQL,
    "postgres": POSTGRESQL,
    "mysql": MYSQL,
    "mariadb": MYSQL,
    "mssql": SQLSERVER,
    "sqlserver": SQLSERVER,
    "oracle": ORACLE,
}


def register_driver(scheme: str, spec: DriverSpec) -> None:
    """Register (or replace) the driver used for a DSN scheme."""
    _drivers[scheme.lower()] = spec


def _scheme(identifier: str) -> str:
    # "postgresql+psycopg2" -> "postgresql"
    return urlsplit(identifier).scheme.lower().split("+", 1)[0]


def resolve_source(identifier: str, sources: Optional[dict[str, str]] = None) -> ResolvedSource:
    """
    Resolve a source identifier to a DSN and its driver.

    Args:
        identifier: A DSN, or the name of a configured source.
        sources: Named sources to look names up in. Defaults to
            ``config.DATABASE_SOURCES``.

    Returns:
        The parsed DSN with its DriverSpec.

    Raises:
        ResolutionError: Unknown source name or unsupported DSN scheme.
    """
    if not isinstance(identifier, str) or not identifier.strip():
        raise ResolutionError("Source identifier is empty")
    identifier = identifier.strip()
    sources = config.DATABASE_SOURCES if sources is None else sources

    if _scheme(identifier) in _drivers:
        dsn = identifier
    elif identifier.lower() in sources:
        dsn = sources[identifier.lower()]
    else:
        raise ResolutionError(f"Unknown database source: {redact(identifier)}")

    scheme = _scheme(dsn)
    if scheme not in _drivers:
        raise ResolutionError(
            f"Source '{redact(identifier)}' uses unsupported scheme '{scheme or '<none>'}'"
        )
    logger.debug(f"Resolved source '{redact(identifier)}' to driver {_drivers[scheme].module_name}")
    return ResolvedSource(name=identifier, url=urlsplit(dsn), driver=_drivers[scheme])


def redact(identifier: str) -> str:
    """Mask the password of a DSN so it can be logged."""
    if not isinstance(identifier, str):
        return repr(identifier)
    url = urlsplit(identifier)
    if not url.password:
        return identifier
    netloc = url.netloc.replace(f":{url.password}@", ":***@", 1)
    return url._replace(netloc=netloc).geturl()
