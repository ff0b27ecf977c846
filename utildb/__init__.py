"""Database access helpers: role-based connections and parameterized queries.

The module-level functions act on a process-wide default ``Database``; call
``init()`` once at startup. Applications that prefer explicit wiring can build
their own ``Database(config)`` instead.
"""

from .config import DatabaseConfig, DriverDebugLevel, HelperDebugLevel, RoleConfig
from .connection import ConnectionHandle, ConnectionType, Role, parse_connection_type
from .errors import DatabaseError, InsertResultError, MultipleStatementsError
from .helper import Database, WriteResult

_default = Database()


def get_default() -> Database:
    return _default


def init(config) -> None:
    _default.configure(config)


def reset() -> None:
    _default.reset()


def set_driver_debug_level(level) -> None:
    _default.set_driver_debug_level(level)


def set_helper_debug_level(level) -> None:
    _default.set_helper_debug_level(level)


def create_connection(connection_type):
    return _default.create_connection(connection_type)


def get_database_name(connection_type):
    return _default.get_database_name(connection_type)


def get_count(connection_type, table_name, callback=None):
    return _default.get_count(connection_type, table_name, callback)


def do_parameterized_query(connection_type, sql, values=None, callback=None):
    return _default.do_parameterized_query(connection_type, sql, values, callback)


def do_parameterized_query_single(connection_type, sql, values=None, callback=None):
    return _default.do_parameterized_query_single(connection_type, sql, values, callback)


def do_parameterized_insert(connection_type, sql, values=None, callback=None, id_column="id"):
    return _default.do_parameterized_insert(connection_type, sql, values, callback, id_column=id_column)


def do_parameterized_update(connection_type, sql, values=None, callback=None):
    return _default.do_parameterized_update(connection_type, sql, values, callback)


def do_parameterized_delete(connection_type, sql, id, callback=None):
    return _default.do_parameterized_delete(connection_type, sql, id, callback)


__all__ = [
    "ConnectionHandle",
    "ConnectionType",
    "Database",
    "DatabaseConfig",
    "DatabaseError",
    "DriverDebugLevel",
    "HelperDebugLevel",
    "InsertResultError",
    "MultipleStatementsError",
    "Role",
    "RoleConfig",
    "WriteResult",
    "create_connection",
    "do_parameterized_delete",
    "do_parameterized_insert",
    "do_parameterized_query",
    "do_parameterized_query_single",
    "do_parameterized_update",
    "get_count",
    "get_database_name",
    "get_default",
    "init",
    "parse_connection_type",
    "reset",
    "set_driver_debug_level",
    "set_helper_debug_level",
]
