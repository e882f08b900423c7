import sys
from pathlib import Path

import pytest

# Ensure project root on sys.path
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from db import Connection  # noqa: E402
from db.drivers import DriverSpec, register_driver  # noqa: E402

FAKE_DRIVER = DriverSpec(
    module_name="tests.fakedb",
    package=None,
    connect=lambda module, url: module.connect(url),
    probe_product=lambda module, handle: handle.product,
    set_autocommit=lambda handle, enabled: setattr(handle, "autocommit", enabled),
    is_open=lambda handle: not handle.closed,
)
register_driver("fake", FAKE_DRIVER)

ITEMS_SCHEMA = """
    CREATE TABLE items (
        id   INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE,
        qty  INTEGER
    )
"""


@pytest.fixture()
def sqlite_source(tmp_path):
    return f"sqlite:///{tmp_path / 'test.db'}"


@pytest.fixture()
def db(sqlite_source):
    conn = Connection(sqlite_source)
    conn.open()
    conn.query(ITEMS_SCHEMA)
    yield conn
    conn.close()


@pytest.fixture()
def fake_connection():
    """Factory: open a Connection on the recording driver reporting ``product``."""
    opened = []

    def _open(product="FakeDB"):
        conn = Connection(f"fake://db?product={product}")
        conn.open()
        opened.append(conn)
        return conn, conn._handle

    yield _open
    for conn in opened:
        conn.close()
