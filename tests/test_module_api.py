"""Tests for the module-level functions backed by the default Database."""
import pytest

import utildb
from utildb.config import DriverDebugLevel, HelperDebugLevel


@pytest.fixture(autouse=True)
def clean_default():
    utildb.reset()
    yield
    utildb.reset()


LEGACY_CONFIG = {
    "mysql_admin": {"host": "a", "port": 5432, "username": "root", "password": "x", "database": "admin_db"},
    "mysql_rw": {"host": "b", "port": 5432, "username": "rw", "password": "y", "database": "rw_db"},
    "mysql_ro": {"host": "c", "port": 5432, "username": "ro", "password": "z", "database": "ro_db"},
}


class TestBeforeInit:
    def test_operations_return_none(self, mock_pg):
        assert utildb.create_connection("ADMIN") is None
        assert utildb.get_database_name("ADMIN") is None
        assert utildb.get_count("RO", "t") is None
        assert utildb.do_parameterized_query("RO", "SELECT 1") is None
        assert utildb.do_parameterized_query_single("RO", "SELECT 1") is None
        assert utildb.do_parameterized_insert("RW", "INSERT") is None
        assert utildb.do_parameterized_update("RW", "UPDATE") is None
        assert utildb.do_parameterized_delete("RW", "DELETE", 1) is None
        mock_pg.connect.assert_not_called()


class TestAfterInit:
    def test_legacy_config_shape(self):
        utildb.init(LEGACY_CONFIG)
        assert utildb.get_database_name("ADMIN") == "admin_db"
        assert utildb.get_database_name("RW") == "rw_db"
        assert utildb.get_database_name("MULTI_RW") == "rw_db"
        assert utildb.get_database_name("bogus") == "ro_db"

    def test_debug_setters(self):
        utildb.init(LEGACY_CONFIG)
        utildb.set_driver_debug_level("QUERIES_AND_ROWS")
        utildb.set_helper_debug_level("ON")
        default = utildb.get_default()
        assert default.driver_debug_level is DriverDebugLevel.QUERIES_AND_ROWS
        assert default.helper_debug_level is HelperDebugLevel.ON
        assert utildb.create_connection("RO").options.debug is DriverDebugLevel.QUERIES_AND_ROWS

    def test_query_through_default(self, mock_pg, mock_cursor):
        utildb.init(LEGACY_CONFIG)
        mock_cursor.fetchone.return_value = {"id": 42}
        assert utildb.do_parameterized_insert("RW", "INSERT INTO t DEFAULT VALUES RETURNING id").result() == 42
        assert mock_pg.connect.call_args.kwargs["dbname"] == "rw_db"
