"""Shared fixtures for the utildb test suite."""

from unittest.mock import MagicMock, patch

import pytest

from utildb.config import DatabaseConfig, RoleConfig
from utildb.helper import Database


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------

def make_config(**kwargs):
    """Create a DatabaseConfig with a distinct database per role."""
    defaults = {
        "admin": RoleConfig("admin-host", 5432, "admin_user", "admin_pw", "app_admin"),
        "rw": RoleConfig("rw-host", 5433, "rw_user", "rw_pw", "app_rw"),
        "ro": RoleConfig("ro-host", 5434, "ro_user", "ro_pw", "app_ro"),
    }
    defaults.update(kwargs)
    return DatabaseConfig(**defaults)


@pytest.fixture
def config():
    return make_config()


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_cursor():
    """Mock RealDictCursor returning one row by default."""
    cursor = MagicMock()
    cursor.description = [("id",)]
    cursor.fetchone.return_value = {"id": 1}
    cursor.fetchall.return_value = []
    cursor.rowcount = 1
    cursor.statusmessage = "INSERT 0 1"
    return cursor


@pytest.fixture
def mock_conn(mock_cursor):
    conn = MagicMock()
    conn.cursor.return_value = mock_cursor
    return conn


@pytest.fixture
def mock_pg(mock_conn):
    """Patch psycopg2 in the connection factory so connect() yields mock_conn."""
    with patch("utildb.connection.psycopg2") as pg:
        pg.connect.return_value = mock_conn
        yield pg


@pytest.fixture
def db(config, mock_pg):
    database = Database(config, max_workers=1)
    yield database
    database.shutdown()
